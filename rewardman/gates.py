"""
Rewardman Gates - Validation rules.

R1: TrustedInvoker - Scheduled trigger carries the shared sweep secret
R2: PrizeTableIntegrity - Valid weights and points, a no-win entry
R3: PointsAmount - Integer, positive, within MAX_POINTS_PER_OPERATION
R4: SufficientBalance - Redemption cannot exceed the current balance
"""

import hmac
from dataclasses import dataclass


class GateError(Exception):
    """Gate validation error."""

    def __init__(self, gate_name: str, message: str, details: dict | None = None):
        self.gate_name = gate_name
        self.message = message
        self.details = details or {}
        super().__init__(f"[{gate_name}] {message}")


@dataclass
class GateResult:
    """Result of a gate check."""

    passed: bool
    gate_name: str
    message: str = ""


# =============================================================================
# Gates
# =============================================================================


class Gates:
    """Rewardman validation gates."""

    # =========================================================================
    # R1: Trusted Invoker
    # =========================================================================

    @classmethod
    def trusted_invoker(cls, provided: str, secret: str) -> GateResult:
        """
        R1: Caller presents the shared secret of the scheduled trigger.

        Unlike webhook signatures, an empty secret never passes: the sweep
        mutates the ledger and must not be callable by anyone.

        Args:
            provided: Secret sent by the caller (header value)
            secret: Configured REWARDMAN["SWEEP_SECRET"]

        Raises:
            GateError: If no secret is configured or the values differ
        """
        if not secret:
            raise GateError(
                "R1_TrustedInvoker",
                "Sweep secret is not configured.",
            )

        if not provided:
            raise GateError(
                "R1_TrustedInvoker",
                "Missing sweep secret.",
            )

        if not hmac.compare_digest(provided.encode(), secret.encode()):
            raise GateError(
                "R1_TrustedInvoker",
                "Invalid sweep secret.",
            )

        return GateResult(True, "R1_TrustedInvoker")

    @classmethod
    def check_trusted_invoker(cls, *args, **kwargs) -> bool:
        """Check without raising (returns bool)."""
        try:
            cls.trusted_invoker(*args, **kwargs)
            return True
        except GateError:
            return False

    # =========================================================================
    # R2: Prize Table Integrity
    # =========================================================================

    @classmethod
    def prize_table_integrity(cls, entries) -> GateResult:
        """
        R2: The table can always be rolled and can express a loss.

        Args:
            entries: Sequence of PrizeTableEntry

        Raises:
            GateError: If empty, a weight is negative, the total is zero,
                keys repeat, points are not a positive int, or no entry is a
                no-win outcome
        """
        if not entries:
            raise GateError("R2_PrizeTableIntegrity", "Prize table is empty.")

        negative = [e.key for e in entries if e.weight < 0]
        if negative:
            raise GateError(
                "R2_PrizeTableIntegrity",
                "Weights must be non-negative.",
                {"keys": negative},
            )

        if sum(e.weight for e in entries) <= 0:
            raise GateError("R2_PrizeTableIntegrity", "Total weight must be positive.")

        keys = [e.key for e in entries]
        if len(set(keys)) != len(keys):
            raise GateError(
                "R2_PrizeTableIntegrity",
                "Prize keys must be unique.",
                {"keys": keys},
            )

        bad_points = [
            e.key
            for e in entries
            if e.points_granted is not None
            and (isinstance(e.points_granted, bool) or not isinstance(e.points_granted, int) or e.points_granted <= 0)
        ]
        if bad_points:
            raise GateError(
                "R2_PrizeTableIntegrity",
                "Points granted must be a positive integer or None.",
                {"keys": bad_points},
            )

        if not any(e.points_granted is None for e in entries):
            raise GateError(
                "R2_PrizeTableIntegrity",
                "Table needs at least one entry without points (no win).",
            )

        return GateResult(True, "R2_PrizeTableIntegrity")

    @classmethod
    def check_prize_table_integrity(cls, entries) -> bool:
        """Check without raising (returns bool)."""
        try:
            cls.prize_table_integrity(entries)
            return True
        except GateError:
            return False

    # =========================================================================
    # R3: Points Amount
    # =========================================================================

    @classmethod
    def points_amount(cls, points, allow_negative: bool = False) -> GateResult:
        """
        R3: Points are a non-zero integer within the per-operation bound.

        Args:
            points: Amount to validate
            allow_negative: Accept negative deltas (admin adjustments)

        Raises:
            GateError: If not an int, zero, negative (unless allowed) or too large
        """
        from rewardman.conf import rewardman_settings

        limit = rewardman_settings.MAX_POINTS_PER_OPERATION

        if isinstance(points, bool) or not isinstance(points, int):
            raise GateError(
                "R3_PointsAmount",
                "Points must be an integer.",
                {"points": points},
            )

        if points == 0 or (points < 0 and not allow_negative):
            raise GateError(
                "R3_PointsAmount",
                "Points must be positive." if not allow_negative else "Points must be non-zero.",
                {"points": points},
            )

        if abs(points) > limit:
            raise GateError(
                "R3_PointsAmount",
                f"Points exceed the per-operation limit ({limit}).",
                {"points": points, "limit": limit},
            )

        return GateResult(True, "R3_PointsAmount")

    @classmethod
    def check_points_amount(cls, *args, **kwargs) -> bool:
        """Check without raising (returns bool)."""
        try:
            cls.points_amount(*args, **kwargs)
            return True
        except GateError:
            return False

    # =========================================================================
    # R4: Sufficient Balance
    # =========================================================================

    @classmethod
    def sufficient_balance(cls, available: int, requested: int) -> GateResult:
        """
        R4: Redemption cannot take the balance below zero.

        Raises:
            GateError: If requested > available
        """
        if requested > available:
            raise GateError(
                "R4_SufficientBalance",
                "Insufficient points.",
                {"available": available, "requested": requested},
            )

        return GateResult(True, "R4_SufficientBalance")

    @classmethod
    def check_sufficient_balance(cls, *args, **kwargs) -> bool:
        """Check without raising (returns bool)."""
        try:
            cls.sufficient_balance(*args, **kwargs)
            return True
        except GateError:
            return False
