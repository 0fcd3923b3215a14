"""Pytest fixtures for Rewardman tests."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from rewardman.models import EligibilityToken, LedgerTransaction, MintRule
from rewardman.prizes import PrizeKind, PrizeTable, PrizeTableEntry


class FixedRandom:
    """Random source that always returns the same value."""

    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.fixture
def user_id():
    return "uid-alice"


@pytest.fixture
def now():
    """Mid-afternoon UTC, far from any day boundary."""
    return datetime(2025, 3, 10, 15, 0, tzinfo=timezone.utc)


@pytest.fixture
def coin_table():
    """Two equal halves: [0, 0.5) loses, [0.5, 1) wins 100 points."""
    return PrizeTable([
        PrizeTableEntry("nothing", "Better luck next time!", 1),
        PrizeTableEntry("jackpot", "100 bonus points!", 1, 100, PrizeKind.POINTS, Decimal("1.00")),
    ])


@pytest.fixture
def win():
    return FixedRandom(0.75)


@pytest.fixture
def lose():
    return FixedRandom(0.1)


@pytest.fixture
def make_token(db, now):
    """Factory for eligibility tokens."""

    def _make(user_id="uid-alice", rule=MintRule.VIP_DAILY, created_at=None):
        return EligibilityToken.objects.create(
            user_id=user_id,
            rule=rule,
            created_at=created_at or now - timedelta(hours=1),
        )

    return _make


@pytest.fixture
def token(make_token, user_id):
    return make_token(user_id=user_id)


@pytest.fixture
def make_grant(db, now):
    """Factory for expiring ledger grants."""

    def _make(user_id="uid-alice", points=100, created_at=None, expires_at=None, reason="wheel:jackpot"):
        created_at = created_at or now
        return LedgerTransaction.objects.create(
            user_id=user_id,
            delta=points,
            reason=reason,
            created_at=created_at,
            expires_at=expires_at or created_at + timedelta(days=30),
        )

    return _make
