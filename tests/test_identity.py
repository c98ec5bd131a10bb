"""
Tests de identidad de listings por URL.
"""

import pytest

from consenso.listings import (
    detect_source,
    find_duplicate,
    resolve_listing_identity,
    url_hash,
)
from consenso.models import Listing, ListingStatus

from conftest import make_listing


class TestResolveListingIdentity:
    def test_homegate_numeric_id(self):
        identity = resolve_listing_identity("https://www.homegate.ch/rent/12345678")
        assert identity.source == "homegate"
        assert identity.external_id == "homegate:12345678"

    def test_same_url_same_id(self):
        url = "https://www.homegate.ch/rent/12345678"
        assert resolve_listing_identity(url) == resolve_listing_identity(url)

    @pytest.mark.parametrize(
        "url, expected",
        [
            ("https://www.immoscout24.ch/en/d/flat-rent-zurich/8012345?utm=x", "immoscout24:8012345"),
            ("https://www.anibis.ch/de/d-immobilien/4567890/", "anibis:4567890"),
            ("https://www.ricardo.ch/de/a/wohnung-3-5-zimmer/1234567/", "ricardo:1234567"),
            ("https://homegate.ch/buy/3001234567", "homegate:3001234567"),
        ],
    )
    def test_known_portals(self, url, expected):
        assert resolve_listing_identity(url).external_id == expected

    def test_known_portal_without_digits_falls_back_to_hash(self):
        url = "https://www.homegate.ch/rent/apartment-zurich"
        assert resolve_listing_identity(url).external_id == f"homegate:{url_hash(url)}"

    def test_portal_without_numeric_pattern_uses_hash(self):
        url = "https://www.facebook.com/marketplace/item/123456/"
        identity = resolve_listing_identity(url)

        assert identity.source == "facebook"
        assert identity.external_id == f"facebook:{url_hash(url)}"

    def test_unknown_host(self):
        identity = resolve_listing_identity("https://example.com/flat/99")
        assert identity.source == "other"
        assert identity.external_id.startswith("other:")

    def test_not_a_url(self):
        assert resolve_listing_identity("ab").external_id == "other:2e9"

    def test_lone_surrogate_does_not_fail(self):
        url = "https://example.com/\ud800"
        identity = resolve_listing_identity(url)

        assert identity.source == "other"
        assert identity == resolve_listing_identity(url)


class TestDetectSource:
    @pytest.mark.parametrize(
        "url, source",
        [
            ("https://www.homegate.ch/rent/1", "homegate"),
            ("https://m.immoscout24.ch/x/1", "immoscout24"),
            ("https://www.comparis.ch/immobilien/marktplatz/details/show/1", "comparis"),
            ("https://nothomegate.ch/rent/1", "other"),
            ("https://homegate.ch.evil.com/rent/1", "other"),
            ("", "other"),
        ],
    )
    def test_by_hostname(self, url, source):
        assert detect_source(url) == source


class TestUrlHash:
    @pytest.mark.parametrize("text, expected", [("", "0"), ("a", "2p"), ("ab", "2e9")])
    def test_known_values(self, text, expected):
        assert url_hash(text) == expected

    def test_lone_surrogate_hashes_its_code_unit(self):
        # 0xD800 como unidad UTF-16 suelta: 55296 = "16o0" en base 36
        assert url_hash("\ud800") == "16o0"

    def test_order_sensitive(self):
        assert url_hash("ab") != url_hash("ba")

    def test_long_input_stays_in_32_bits(self):
        value = url_hash("https://example.com/" + "x" * 500)
        assert int(value, 36) <= 2**31


class TestFindDuplicate:
    def test_finds_same_external_id(self):
        listings = [make_listing("homegate:1"), make_listing("homegate:2")]
        assert find_duplicate(listings, "homegate:2") is listings[1]

    def test_deleted_listing_is_not_a_duplicate(self):
        listings = [make_listing("homegate:1", status=ListingStatus.DELETED)]
        assert find_duplicate(listings, "homegate:1") is None

    def test_no_match(self):
        assert find_duplicate([], "homegate:1") is None


class TestListingFromUrl:
    def test_resolves_identity_and_marks_adder_as_seen(self):
        listing = Listing.from_url(
            "https://www.homegate.ch/rent/12345678",
            room_id="room-1",
            added_by_user_id="anna",
            price=2100,
        )

        assert listing.source == "homegate"
        assert listing.external_id == "homegate:12345678"
        assert listing.external_url == "https://www.homegate.ch/rent/12345678"
        assert listing.seen_by == ["anna"]
        assert listing.status == ListingStatus.UNSEEN
        assert listing.price == 2100
