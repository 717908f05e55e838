"""
Resilience Layer for custos.

Bounded retry with exponential backoff for transient upstream failures.
"""

from .retry import execute_with_retry, is_transient_error

__all__ = [
    "execute_with_retry",
    "is_transient_error",
]
