"""Exception hierarchy for oneshot-agent.

Everything raised deliberately by this package derives from
:class:`OneShotAgentError`, so the action layer can turn any of them into a
failure envelope without catching unrelated bugs by accident.
"""

from __future__ import annotations


class OneShotAgentError(Exception):
    """Base class for all oneshot-agent errors."""


class ConfigurationError(OneShotAgentError):
    """Required settings (API credentials, keys, model names) are missing."""


class ActionValidationError(OneShotAgentError):
    """Action input failed schema validation."""


class RemoteServiceError(OneShotAgentError):
    """The remote execution service was unreachable or returned an error."""

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def __str__(self) -> str:
        base = super().__str__()
        if self.status_code is None:
            return base
        detail = f" {self.body[:300]}" if self.body else ""
        return f"{base} (HTTP {self.status_code}){detail}"


class WalletNotFound(RemoteServiceError):
    """The requested custodial wallet does not exist."""


class RemoteStoreError(RemoteServiceError):
    """A signed delegation could not be persisted remotely."""


class SigningError(OneShotAgentError):
    """The local signing key is unavailable or refused a request."""


class SigningIdentityUnavailable(SigningError):
    """No smart-account view could be derived from the local signer."""


class SignatureRejected(SigningError):
    """Signing a payload failed or was declined."""


class StateMutabilityMismatch(OneShotAgentError):
    """A contract method was used through the wrong action for its class."""

    def __init__(self, method_id: str, state_mutability: str, expected: tuple[str, ...]):
        super().__init__(
            f"Contract method {method_id} is '{state_mutability}'; "
            f"this action requires one of: {', '.join(expected)}"
        )
        self.method_id = method_id
        self.state_mutability = state_mutability
        self.expected = expected


class PollingExhausted(OneShotAgentError):
    """A transaction did not reach a terminal status within the polling bounds."""

    def __init__(self, message: str, transaction_id: str, last_status: str | None = None):
        super().__init__(message)
        self.transaction_id = transaction_id
        self.last_status = last_status


class PollingCancelled(PollingExhausted):
    """The caller cancelled the wait before a terminal status was observed."""
