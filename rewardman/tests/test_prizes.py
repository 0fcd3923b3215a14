"""
Tests for the prize table and weighted roll.

- Linear-scan selection is deterministic for a fixed random value
- Table order breaks ties
- Roll frequencies follow the weights
- Table validation (R2) and configuration overrides
- One table per loyalty tier
"""

import random
from decimal import Decimal

import pytest

from rewardman.exceptions import RewardmanError
from rewardman.prizes import (
    DEFAULT_PRIZE_TABLES,
    DEFAULT_PRIZES,
    PrizeKind,
    PrizeTable,
    PrizeTableEntry,
    get_prize_table,
)
from rewardman.tests.conftest import FixedRandom


@pytest.fixture
def table():
    return PrizeTable([
        PrizeTableEntry("nothing", "No win", 5),
        PrizeTableEntry("small", "10 points", 3, 10, PrizeKind.POINTS),
        PrizeTableEntry("big", "50 points", 2, 50, PrizeKind.POINTS),
    ])


class TestSelect:
    """select(r) scans entries in table order."""

    @pytest.mark.parametrize(
        "r, expected",
        [
            (0, "nothing"),
            (4.99, "nothing"),
            (5, "small"),
            (7.99, "small"),
            (8, "big"),
            (9.99, "big"),
        ],
    )
    def test_boundaries(self, table, r, expected):
        assert table.select(r).key == expected

    def test_rounding_overflow_falls_back_to_last(self, table):
        assert table.select(10.0000001).key == "big"

    def test_zero_weight_entry_never_selected(self):
        table = PrizeTable([
            PrizeTableEntry("nothing", "No win", 1),
            PrizeTableEntry("ghost", "Never", 0, 999, PrizeKind.POINTS),
            PrizeTableEntry("win", "Win", 1, 5, PrizeKind.POINTS),
        ])
        assert table.select(1.0).key == "win"

    def test_equal_weights_resolved_by_table_order(self):
        a = PrizeTableEntry("a", "A", 1)
        b = PrizeTableEntry("b", "B", 1, 5, PrizeKind.POINTS)
        assert PrizeTable([a, b]).select(0.5).key == "a"
        assert PrizeTable([b, a]).select(0.5).key == "b"


class TestRoll:
    """roll(rng) scales rng.random() by the total weight."""

    def test_fixed_random_is_reproducible(self, table):
        assert table.roll(FixedRandom(0.0)).key == "nothing"
        assert table.roll(FixedRandom(0.6)).key == "small"
        assert table.roll(FixedRandom(0.95)).key == "big"

    def test_default_source(self, table):
        assert table.roll() in table.entries

    def test_distribution_follows_weights(self, table):
        """20,000 seeded rolls stay within 2 points of each probability."""
        rng = random.Random(20250310)
        trials = 20_000
        counts = {entry.key: 0 for entry in table}
        for _ in range(trials):
            counts[table.roll(rng).key] += 1

        for key, probability in table.probabilities().items():
            assert abs(counts[key] / trials - probability) < 0.02, key

    def test_default_table_distribution(self):
        table = PrizeTable(DEFAULT_PRIZES)
        rng = random.Random(7)
        trials = 10_000
        counts = {entry.key: 0 for entry in table}
        for _ in range(trials):
            counts[table.roll(rng).key] += 1

        for key, probability in table.probabilities().items():
            assert abs(counts[key] / trials - probability) < 0.02, key


class TestTable:
    def test_probabilities_sum_to_one(self, table):
        assert sum(table.probabilities().values()) == pytest.approx(1.0)

    def test_no_win_prefers_nothing_kind(self):
        table = PrizeTable([
            PrizeTableEntry("coupon", "5% off", 1, None, PrizeKind.DISCOUNT, Decimal("1.50")),
            PrizeTableEntry("nothing", "No win", 1),
        ])
        assert table.no_win().key == "nothing"

    def test_get(self, table):
        assert table.get("small").points_granted == 10
        assert table.get("missing") is None

    def test_as_dict(self, table):
        assert table.get("big").as_dict() == {
            "key": "big",
            "label": "50 points",
            "kind": "points",
            "points": 50,
        }

    def test_negative_weight_rejected(self):
        with pytest.raises(RewardmanError, match="non-negative"):
            PrizeTable([
                PrizeTableEntry("nothing", "No win", 1),
                PrizeTableEntry("bad", "Bad", -1, 5, PrizeKind.POINTS),
            ])

    def test_table_without_no_win_rejected(self):
        with pytest.raises(RewardmanError, match="no win"):
            PrizeTable([PrizeTableEntry("win", "Win", 1, 5, PrizeKind.POINTS)])

    def test_zero_total_weight_rejected(self):
        with pytest.raises(RewardmanError, match="Total weight"):
            PrizeTable([PrizeTableEntry("nothing", "No win", 0)])

    def test_duplicate_keys_rejected(self):
        with pytest.raises(RewardmanError, match="unique"):
            PrizeTable([
                PrizeTableEntry("nothing", "No win", 1),
                PrizeTableEntry("nothing", "Again", 1),
            ])

    def test_empty_table_rejected(self):
        with pytest.raises(RewardmanError, match="empty"):
            PrizeTable([])

    def test_invalid_table_error_code(self):
        with pytest.raises(RewardmanError) as exc_info:
            PrizeTable([PrizeTableEntry("nothing", "No win", 1), PrizeTableEntry("bad", "Bad", -1)])

        assert exc_info.value.code == "INVALID_PRIZE_TABLE"
        assert exc_info.value.data == {"keys": ["bad"]}

    @pytest.mark.parametrize("points", ["25", 2.5, 0, -10, True])
    def test_points_must_be_positive_int(self, points):
        with pytest.raises(RewardmanError, match="positive integer") as exc_info:
            PrizeTable([
                PrizeTableEntry("nothing", "No win", 1),
                PrizeTableEntry("pts", "Points", 1, points, PrizeKind.POINTS),
            ])
        assert exc_info.value.data == {"keys": ["pts"]}

    def test_string_points_rejected_from_config(self):
        with pytest.raises(RewardmanError) as exc_info:
            PrizeTable.from_config([
                {"key": "nothing", "label": "No win", "weight": 1},
                {"key": "pts", "label": "25 points", "weight": 1, "points_granted": "25"},
            ])
        assert exc_info.value.code == "INVALID_PRIZE_TABLE"


class TestConfiguredTable:
    def test_builtin_table_by_default(self):
        assert [e.key for e in get_prize_table()] == [e.key for e in DEFAULT_PRIZES]

    def test_override_from_settings(self, settings):
        settings.REWARDMAN = {
            "PRIZE_TABLE": [
                {"key": "nothing", "label": "No win", "weight": 9},
                {"key": "fries", "label": "Free fries", "weight": 1, "kind": "free_item", "cost": "0.80"},
                {"key": "pts", "label": "20 points", "weight": 1, "points_granted": 20},
            ],
        }
        table = get_prize_table()

        assert [e.key for e in table] == ["nothing", "fries", "pts"]
        assert table.get("fries").cost == Decimal("0.80")
        assert table.get("fries").kind == PrizeKind.FREE_ITEM
        assert table.get("pts").kind == PrizeKind.POINTS
        assert table.get("nothing").kind == PrizeKind.NOTHING

    def test_invalid_settings_table(self, settings):
        settings.REWARDMAN = {"PRIZE_TABLE": [{"key": "win", "weight": 1, "points_granted": 5}]}

        with pytest.raises(RewardmanError) as exc_info:
            get_prize_table()
        assert exc_info.value.code == "INVALID_PRIZE_TABLE"


class TestTierTables:
    """Higher tiers spin richer wheels."""

    @pytest.mark.parametrize(
        "tier, keys",
        [
            ("bronze", ["nothing", "points_small", "points_medium", "discount_5", "free_side"]),
            ("silver", ["nothing", "points_small", "points_medium", "discount_5", "discount_10", "free_side"]),
            (
                "gold",
                ["nothing", "points_small", "points_medium", "discount_5", "discount_10", "free_side", "free_dessert"],
            ),
            (
                "platinum",
                [
                    "nothing",
                    "points_small",
                    "points_medium",
                    "points_large",
                    "discount_10",
                    "discount_15",
                    "free_side",
                    "free_dessert",
                    "free_burger",
                ],
            ),
        ],
    )
    def test_builtin_tier_tables(self, tier, keys):
        assert [e.key for e in get_prize_table(tier)] == keys

    @pytest.mark.parametrize("tier", ["bronze", "silver", "gold", "platinum"])
    def test_weights_sum_to_one_hundred(self, tier):
        assert PrizeTable(DEFAULT_PRIZE_TABLES[tier]).total_weight == 100

    def test_bronze_weights(self):
        assert get_prize_table("bronze").probabilities() == {
            "nothing": 0.40,
            "points_small": 0.35,
            "points_medium": 0.15,
            "discount_5": 0.08,
            "free_side": 0.02,
        }

    def test_platinum_jackpots(self):
        table = get_prize_table("platinum")

        assert table.get("points_large").points_granted == 100
        assert table.get("discount_15").cost == Decimal("4.50")
        assert table.get("free_burger").kind == PrizeKind.FREE_ITEM

    def test_unknown_tier_uses_bronze(self):
        assert [e.key for e in get_prize_table("member")] == [e.key for e in DEFAULT_PRIZES]

    def test_tier_override_from_settings(self, settings):
        settings.REWARDMAN = {
            "PRIZE_TABLES": {
                "gold": [
                    {"key": "nothing", "label": "No win", "weight": 1},
                    {"key": "gold_pts", "label": "200 points", "weight": 1, "points_granted": 200},
                ],
            },
        }

        assert [e.key for e in get_prize_table("gold")] == ["nothing", "gold_pts"]
        assert [e.key for e in get_prize_table("platinum")][-1] == "free_burger"
        assert [e.key for e in get_prize_table("silver")][-1] == "free_side"

    def test_single_table_applies_to_every_tier(self, settings):
        settings.REWARDMAN = {"PRIZE_TABLE": [{"key": "nothing", "label": "No win", "weight": 1}]}

        assert [e.key for e in get_prize_table("platinum")] == ["nothing"]
