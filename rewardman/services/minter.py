"""Token minter - turns activity signals into eligibility tokens.

Rules are independent and additive: one call may mint one token per
satisfied rule. Minting grants eligibility only, never points.
"""

import logging
from decimal import Decimal

from django.db import transaction
from django.utils import timezone
from django.utils.module_loading import import_string

from rewardman.conf import rewardman_settings
from rewardman.exceptions import RewardmanError
from rewardman.models import EligibilityToken, MintRule
from rewardman.protocols.signals import ActivitySignals, ActivitySignalsBackend
from rewardman.signals import tokens_minted

logger = logging.getLogger(__name__)


def _spend_threshold_met(signals: ActivitySignals) -> bool:
    spent = Decimal(str(signals.spent_last_24h or 0))
    return spent >= Decimal(str(rewardman_settings.SPEND_THRESHOLD))


RULE_CONDITIONS = {
    MintRule.VIP_DAILY: lambda signals: bool(signals.is_vip),
    MintRule.SPEND_THRESHOLD: _spend_threshold_met,
    MintRule.PROFILE_COMPLETE: lambda signals: bool(signals.profile_complete),
}


def satisfied_rules(signals: ActivitySignals) -> list[str]:
    """Enabled rules whose condition holds, in declaration order."""
    enabled = rewardman_settings.MINT_RULES
    return [
        rule
        for rule, condition in RULE_CONDITIONS.items()
        if enabled.get(rule.value, False) and condition(signals)
    ]


def mint(user_id: str, signals: ActivitySignals, now=None) -> int:
    """
    Create one token per satisfied rule.

    No idempotency key is applied here: callers must not mint twice for the
    same signal window.

    Args:
        user_id: User receiving the tokens
        signals: VIP flag, spend over the last 24h, profile completeness

    Returns:
        Number of tokens created
    """
    rules = satisfied_rules(signals)
    if not rules:
        return 0

    now = now or timezone.now()
    with transaction.atomic():
        tokens = [
            EligibilityToken.objects.create(user_id=user_id, rule=rule, created_at=now)
            for rule in rules
        ]

    logger.info("Minted %d token(s) for user=%s rules=%s", len(tokens), user_id, ",".join(rules))
    tokens_minted.send(sender=EligibilityToken, user_id=user_id, tokens=tokens)
    return len(tokens)


def get_signals_backend() -> ActivitySignalsBackend | None:
    """Get configured ActivitySignalsBackend."""
    backend_path = rewardman_settings.SIGNALS_BACKEND
    if backend_path:
        backend_class = import_string(backend_path)
        return backend_class()
    return None


def mint_from_backend(user_id: str) -> int:
    """
    Gather signals from SIGNALS_BACKEND and mint.

    Raises:
        RewardmanError: SIGNALS_BACKEND_NOT_CONFIGURED
    """
    backend = get_signals_backend()
    if backend is None:
        raise RewardmanError("SIGNALS_BACKEND_NOT_CONFIGURED")
    return mint(user_id, backend.get_signals(user_id))


def unconsumed(user_id: str) -> list[EligibilityToken]:
    """Available tokens, oldest first (the order spins consume them)."""
    tokens = EligibilityToken.objects.filter(user_id=user_id, consumed_at__isnull=True)
    return list(tokens.order_by("created_at", "id"))
