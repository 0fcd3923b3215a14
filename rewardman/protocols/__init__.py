"""Rewardman protocols."""

from rewardman.protocols.signals import (
    ActivitySignals,
    ActivitySignalsBackend,
)

__all__ = [
    "ActivitySignals",
    "ActivitySignalsBackend",
]
