"""Rewardman services.

- minter: eligibility tokens from activity signals
- spin: daily wheel spin (token consumption, roll, settlement)
- ledger: points ledger, balance fold, earning and redemption
- expiry: scheduled neutralization of aged grants
"""

from rewardman.services import ledger
from rewardman.services import minter
from rewardman.services import spin
from rewardman.services import expiry

__all__ = ["ledger", "minter", "spin", "expiry"]
