"""
Django Rewardman - Rewards Loyalty Engine.

Usage:
    from rewardman import RewardsService
    from rewardman.gates import Gates, GateError, GateResult

    RewardsService.mint("uid-123", is_vip=True, spent_last_24h=62)
    result = RewardsService.spin("uid-123")
    if result.ok:
        result.prize.label
    else:
        result.reason  # "NOT_ELIGIBLE" | "COOLDOWN"

    RewardsService.balance("uid-123")
    RewardsService.expiring_within("uid-123", 30)

    # Daily cron
    RewardsService.sweep()
"""


def __getattr__(name):
    if name == "RewardsService":
        from rewardman.service import RewardsService

        return RewardsService
    if name == "Gates":
        from rewardman.gates import Gates

        return Gates
    if name == "GateError":
        from rewardman.gates import GateError

        return GateError
    if name == "GateResult":
        from rewardman.gates import GateResult

        return GateResult
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["RewardsService", "Gates", "GateError", "GateResult"]
__version__ = "0.1.0"
