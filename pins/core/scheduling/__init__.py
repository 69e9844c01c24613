"""Deferred evaluation and pin expiration."""

from pins.core.scheduling.expirations import ExpirationSummary, check_expirations
from pins.core.scheduling.scheduler import DeferredEvaluationScheduler

__all__ = ["DeferredEvaluationScheduler", "ExpirationSummary", "check_expirations"]
