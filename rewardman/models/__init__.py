"""Rewardman models."""

from rewardman.models.token import EligibilityToken, MintRule
from rewardman.models.spin import SpinRecord
from rewardman.models.ledger import LedgerTransaction, Reason

__all__ = [
    # Eligibility
    "EligibilityToken",
    "MintRule",
    # Wheel
    "SpinRecord",
    # Points
    "LedgerTransaction",
    "Reason",
]
