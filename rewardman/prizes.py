"""
Prize tables and weighted roll.

Each loyalty tier spins its own table. Tables are static configuration,
not user data. Order matters: the roll scans entries in table order, so a
fixed random value always selects the same entry.

Usage:
    from rewardman.prizes import get_prize_table

    table = get_prize_table("silver")
    prize = table.roll()
    prize.key, prize.label, prize.points_granted
"""

from __future__ import annotations

import random
from dataclasses import dataclass, replace
from decimal import Decimal


class PrizeKind:
    POINTS = "points"
    DISCOUNT = "discount"
    FREE_ITEM = "free_item"
    NOTHING = "nothing"


@dataclass(frozen=True)
class PrizeTableEntry:
    """One wheel outcome."""

    key: str
    label: str
    weight: float
    points_granted: int | None = None
    kind: str = PrizeKind.NOTHING
    cost: Decimal = Decimal("0")

    @property
    def is_win(self) -> bool:
        return self.kind != PrizeKind.NOTHING

    def as_dict(self) -> dict:
        return {
            "key": self.key,
            "label": self.label,
            "kind": self.kind,
            "points": self.points_granted,
        }


# Outcomes of the restaurant wheel, with cost of goods for the daily cap.
# Weights are set per tier below.
OUTCOMES = {
    entry.key: entry
    for entry in [
        PrizeTableEntry("nothing", "Better luck next time!", 0),
        PrizeTableEntry("points_small", "25 bonus points!", 0, 25, PrizeKind.POINTS, Decimal("0.25")),
        PrizeTableEntry("points_medium", "50 bonus points!", 0, 50, PrizeKind.POINTS, Decimal("0.50")),
        PrizeTableEntry("points_large", "100 bonus points!", 0, 100, PrizeKind.POINTS, Decimal("1.00")),
        PrizeTableEntry("discount_5", "5% off your next order!", 0, None, PrizeKind.DISCOUNT, Decimal("1.50")),
        PrizeTableEntry("discount_10", "10% off your next order!", 0, None, PrizeKind.DISCOUNT, Decimal("3.00")),
        PrizeTableEntry("discount_15", "15% off your next order!", 0, None, PrizeKind.DISCOUNT, Decimal("4.50")),
        PrizeTableEntry("free_side", "Free side with your next order!", 0, None, PrizeKind.FREE_ITEM, Decimal("2.00")),
        PrizeTableEntry("free_dessert", "Free dessert with your next order!", 0, None, PrizeKind.FREE_ITEM, Decimal("1.50")),
        PrizeTableEntry("free_burger", "Free burger with your next order!", 0, None, PrizeKind.FREE_ITEM, Decimal("5.00")),
    ]
}

# Percent weights per tier; each tier sums to 100
TIER_WEIGHTS = {
    "bronze": [
        ("nothing", 40),
        ("points_small", 35),
        ("points_medium", 15),
        ("discount_5", 8),
        ("free_side", 2),
    ],
    "silver": [
        ("nothing", 30),
        ("points_small", 30),
        ("points_medium", 20),
        ("discount_5", 12),
        ("discount_10", 5),
        ("free_side", 3),
    ],
    "gold": [
        ("nothing", 25),
        ("points_small", 25),
        ("points_medium", 25),
        ("discount_5", 10),
        ("discount_10", 8),
        ("free_side", 5),
        ("free_dessert", 2),
    ],
    "platinum": [
        ("nothing", 20),
        ("points_small", 20),
        ("points_medium", 25),
        ("points_large", 10),
        ("discount_10", 10),
        ("discount_15", 5),
        ("free_side", 5),
        ("free_dessert", 3),
        ("free_burger", 2),
    ],
}

DEFAULT_PRIZE_TABLES = {
    tier: [replace(OUTCOMES[key], weight=weight) for key, weight in weights]
    for tier, weights in TIER_WEIGHTS.items()
}

# Table for users whose tier has no table of its own
DEFAULT_PRIZES = DEFAULT_PRIZE_TABLES["bronze"]

_system_random = random.SystemRandom()


class PrizeTable:
    """Ordered, validated list of PrizeTableEntry."""

    def __init__(self, entries):
        from rewardman.exceptions import RewardmanError
        from rewardman.gates import GateError, Gates

        self.entries: tuple[PrizeTableEntry, ...] = tuple(entries)
        try:
            Gates.prize_table_integrity(self.entries)
        except GateError as exc:
            raise RewardmanError("INVALID_PRIZE_TABLE", message=exc.message, **exc.details)

    def __iter__(self):
        return iter(self.entries)

    def __len__(self):
        return len(self.entries)

    @property
    def total_weight(self) -> float:
        return sum(entry.weight for entry in self.entries)

    def select(self, r: float) -> PrizeTableEntry:
        """
        Linear-scan selection for r in [0, total_weight).

        The first entry with r < weight wins, subtracting weights as we go.
        Falls back to the last entry when rounding leaves r unmatched.
        """
        for entry in self.entries:
            if r < entry.weight:
                return entry
            r -= entry.weight
        return self.entries[-1]

    def roll(self, rng=None) -> PrizeTableEntry:
        """
        Weighted random pick. Pure: no persistence, no side effects.

        Args:
            rng: Object with random() -> float in [0, 1). Defaults to SystemRandom.
        """
        rng = rng or _system_random
        return self.select(rng.random() * self.total_weight)

    def get(self, key: str) -> PrizeTableEntry | None:
        for entry in self.entries:
            if entry.key == key:
                return entry
        return None

    def no_win(self) -> PrizeTableEntry:
        """First entry without points or goods (guaranteed by R2)."""
        for entry in self.entries:
            if entry.points_granted is None and entry.kind == PrizeKind.NOTHING:
                return entry
        return next(entry for entry in self.entries if entry.points_granted is None)

    def probabilities(self) -> dict[str, float]:
        total = self.total_weight
        return {entry.key: entry.weight / total for entry in self.entries}

    @classmethod
    def from_config(cls, rows: list[dict]) -> PrizeTable:
        """Build a table from REWARDMAN["PRIZE_TABLE"] or ["PRIZE_TABLES"] rows."""
        entries = []
        for row in rows:
            points = row.get("points_granted")
            kind = row.get("kind") or (PrizeKind.POINTS if points else PrizeKind.NOTHING)
            entries.append(
                PrizeTableEntry(
                    key=row["key"],
                    label=row.get("label", row["key"]),
                    weight=row["weight"],
                    points_granted=points,
                    kind=kind,
                    cost=Decimal(str(row.get("cost", "0"))),
                )
            )
        return cls(entries)


def get_prize_table(tier: str | None = None) -> PrizeTable:
    """
    Table spun by users of `tier`.

    Lookup order: REWARDMAN["PRIZE_TABLES"][tier], REWARDMAN["PRIZE_TABLE"]
    (one table for every tier), the built-in table of the tier, and finally
    the built-in bronze table.
    """
    from rewardman.conf import rewardman_settings

    tables = rewardman_settings.PRIZE_TABLES or {}
    if tier in tables:
        return PrizeTable.from_config(tables[tier])

    rows = rewardman_settings.PRIZE_TABLE
    if rows:
        return PrizeTable.from_config(rows)
    return PrizeTable(DEFAULT_PRIZE_TABLES.get(tier, DEFAULT_PRIZES))
