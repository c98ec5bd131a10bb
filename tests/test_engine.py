"""
Tests del motor de sala, la tabla de diferencias y el script de evaluación.
"""

import json

from consenso.matching import RoomMatcher, diff_criteria
from consenso.matching.conformity import COMBINED_KEY, MatchLevel
from consenso.models import CombineMode, CompatibilitySnapshot, ListingStatus

from conftest import ROOM_ID, FakeScorer, make_listing, make_party


def _records():
    return [
        make_party("anna", location="Zürich", price_from=1000, price_to=1800),
        make_party("ben", weights={"price": 5}, location="Zürich", price_from=1500, price_to=2500),
        make_party("anna", minutes=10, weights={"price": 4}, location="Zürich", price_from=1200, price_to=2200),
        make_party("carla", room_id="room-2", location="Basel"),
    ]


class TestDiffCriteria:
    def test_marks_fields_that_differ(self, settings):
        matcher = RoomMatcher(settings=settings)
        parties = matcher.current_criteria(ROOM_ID, _records())
        combined = matcher.combine(ROOM_ID, _records(), "strict")
        rows = {row.field: row for row in diff_criteria(parties, combined)}

        assert rows["price_from"].values == {
            "anna": "CHF 1,200",
            "ben": "CHF 1,500",
            COMBINED_KEY: "CHF 1,500",
        }
        assert rows["price_from"].has_diff
        assert not rows["location"].has_diff
        assert not rows["features"].has_diff
        assert rows["features"].values["anna"] == "-"

    def test_party_without_criteria(self):
        rows = diff_criteria({"anna": make_party("anna", location="Bern"), "ben": None})
        location = rows[0]
        assert location.values == {"anna": "Bern", "ben": "-", COMBINED_KEY: "-"}
        assert not location.has_diff


class TestRoomMatcher:
    def test_uses_latest_criteria_of_the_room(self, settings):
        matcher = RoomMatcher(settings=settings)
        parties = matcher.current_criteria(ROOM_ID, _records())

        assert list(parties) == ["anna", "ben"]
        assert parties["anna"].criteria.price_from == 1200

    def test_combine(self, settings):
        combined = RoomMatcher(settings=settings).combine(ROOM_ID, _records(), "mixed")

        assert combined.room_id == ROOM_ID
        assert combined.combine_mode == CombineMode.MIXED
        assert combined.from_user_ids == ["anna", "ben"]
        assert (combined.criteria.price_from, combined.criteria.price_to) == (1500, 2200)

    async def test_evaluate_room(self, settings):
        scorer = FakeScorer(70)
        listings = [
            make_listing("homegate:1", price=2300, location="Zürich"),
            make_listing("homegate:2", price=1600, status=ListingStatus.DELETED),
            make_listing("homegate:3", room_id="room-2", price=1600),
        ]
        evaluation = await RoomMatcher(settings=settings, scorer=scorer).evaluate_room(
            ROOM_ID, _records(), listings, mode="strict", with_compatibility=True
        )

        assert [report.external_id for report in evaluation.reports] == ["homegate:1"]
        price = evaluation.reports[0].row("price").matches
        assert price["anna"].level == MatchLevel.NEAR
        assert price["ben"].level == MatchLevel.MATCH
        assert price[COMBINED_KEY].level == MatchLevel.MISS

        assert evaluation.compatibility.score_percent == 70
        assert scorer.calls == [("anna", "ben")]

    async def test_fresh_snapshot_is_reused(self, settings):
        scorer = FakeScorer(20)
        matcher = RoomMatcher(settings=settings, scorer=scorer)
        parties = matcher.current_criteria(ROOM_ID, _records())
        previous = CompatibilitySnapshot(
            room_id=ROOM_ID,
            score_percent=90,
            criteria_refs=[party.ref() for party in parties.values()],
        )

        snapshot = await matcher.compatibility(ROOM_ID, _records(), previous)

        assert snapshot is previous
        assert scorer.calls == []

    async def test_stale_snapshot_is_recomputed(self, settings):
        scorer = FakeScorer(20)
        matcher = RoomMatcher(settings=settings, scorer=scorer)
        previous = CompatibilitySnapshot(room_id=ROOM_ID, score_percent=90)

        snapshot = await matcher.compatibility(ROOM_ID, _records(), previous)

        assert snapshot.score_percent == 20
        assert len(snapshot.criteria_refs) == 2


async def test_run_evaluation_from_file(tmp_path):
    from consenso.scripts.evaluate_room import run_evaluation

    room_file = tmp_path / "room.json"
    room_file.write_text(
        json.dumps(
            {
                "room_id": "room-9",
                "criteria": [
                    {
                        "user_id": "anna",
                        "timestamp": "2026-03-01T12:00:00+00:00",
                        "criteria": {"offer_type": "rent", "price_to": 2000},
                        "weights": {"price_to": 5},
                    },
                    {
                        "user_id": "ben",
                        "timestamp": "2026-03-01T12:05:00+00:00",
                        "criteria": {"offer_type": "rent", "price_to": 2400},
                    },
                ],
                "listings": [
                    {"url": "https://www.homegate.ch/rent/12345678", "price": 2100},
                ],
            }
        ),
        encoding="utf-8",
    )

    result = await run_evaluation(room_file, "all", with_compatibility=False)

    assert result["room_id"] == "room-9"
    assert result["combined"]["criteria"]["price_to"] == 2400
    assert result["combined"]["weights"]["price"] == 5
    assert result["reports"][0]["external_id"] == "homegate:12345678"
    assert "compatibility" not in result
