"""Resilience primitives for calls that cross the network."""
from src.shared.resilience.retry import RetryPolicy, RetrySettings, default_is_retryable

__all__ = [
    "RetryPolicy",
    "RetrySettings",
    "default_is_retryable",
]
