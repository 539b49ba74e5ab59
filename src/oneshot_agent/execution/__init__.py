"""Submission and completion tracking for contract-method calls."""

from oneshot_agent.execution.lifecycle import PollingPolicy, TransactionLifecycle, wait_for_terminal

__all__ = ["PollingPolicy", "TransactionLifecycle", "wait_for_terminal"]
