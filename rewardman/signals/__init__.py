"""
Rewardman signals - public event API.

Emitted signals:
- tokens_minted: Emitted by services.minter.mint() when at least one token is created
- spin_completed: Emitted by services.spin.settle() after a spin is settled
- points_expired: Emitted by services.expiry.sweep() for each neutralized grant
"""

from django.dispatch import Signal

tokens_minted = Signal()  # sender=EligibilityToken, user_id=str, tokens=list
spin_completed = Signal()  # sender=SpinRecord, spin=SpinRecord, transaction=LedgerTransaction|None
points_expired = Signal()  # sender=LedgerTransaction, original=..., compensation=...
