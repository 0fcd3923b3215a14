"""Rewardman exceptions."""


class RewardmanError(Exception):
    """
    Structured exception for rewards operations.

    Carries a machine-readable code, a human message and extra data.
    Eligibility outcomes (NOT_ELIGIBLE, COOLDOWN) are never raised; they are
    returned as SpinResult.

    Usage:
        try:
            RewardsService.redeem("uid-123", 500, "Free entree")
        except RewardmanError as e:
            if e.code == "INSUFFICIENT_POINTS":
                show_balance(e.data["available"])
    """

    _default_messages = {
        "INVALID_POINTS": "Invalid points amount",
        "INSUFFICIENT_POINTS": "Insufficient points for redemption",
        "SIGNALS_BACKEND_NOT_CONFIGURED": "No activity signals backend configured",
        "TOKEN_NOT_CONSUMED": "Eligibility token has not been consumed",
        "INVALID_PRIZE_TABLE": "Prize table is invalid",
    }

    def __init__(self, code: str, message: str | None = None, **data):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(f"[{code}] {self.message}")

    def as_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "data": self.data,
        }
