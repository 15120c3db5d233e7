"""Utility modules for coins-oracle."""

from coins_oracle.utils.slow_operation import OperationState, SlowOperation

__all__ = ["OperationState", "SlowOperation"]
