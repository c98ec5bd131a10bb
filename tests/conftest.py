"""
Fixtures compartidas: fábricas de criterios y listings, scorer falso.
"""

from datetime import datetime, timedelta, timezone

import pytest
from hypothesis import settings as hypothesis_settings

from consenso.analysis import BaseCompatibilityScorer, CompatibilityScore
from consenso.config import Settings
from consenso.models import CriteriaWeights, Listing, SearchCriteria, UserCriteria

# Sin deadline: la primera validación de pydantic puede ser lenta
hypothesis_settings.register_profile("consenso", deadline=None)
hypothesis_settings.load_profile("consenso")

ROOM_ID = "room-1"
BASE_TIME = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_party(user_id, weights=None, minutes=0, room_id=ROOM_ID, **criteria):
    """UserCriteria con offer_type 'rent' salvo que se indique otro."""
    criteria.setdefault("offer_type", "rent")
    return UserCriteria(
        room_id=room_id,
        user_id=user_id,
        timestamp=BASE_TIME + timedelta(minutes=minutes),
        criteria=SearchCriteria(**criteria),
        weights=CriteriaWeights(**(weights or {})),
    )


def make_listing(external_id="homegate:1", room_id=ROOM_ID, **attributes):
    return Listing(room_id=room_id, external_id=external_id, **attributes)


class FakeScorer(BaseCompatibilityScorer):
    """Scorer determinístico que devuelve scores en orden."""

    def __init__(self, *scores, comment="fake comment"):
        self.scores = list(scores) or [50.0]
        self.comment = comment
        self.calls = []

    async def score(self, first, second):
        self.calls.append((first.user_id, second.user_id))
        value = self.scores[min(len(self.calls) - 1, len(self.scores) - 1)]
        return CompatibilityScore(score_percent=value, comment=f"{self.comment} {len(self.calls)}")


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def party():
    return make_party


@pytest.fixture
def listing():
    return make_listing
