"""Agent-callable actions backed by the 1Shot API."""

from oneshot_agent.actions.provider import OneShotActions, build_registry
from oneshot_agent.actions.registry import Action, ActionRegistry, ActionResult

__all__ = [
    "Action",
    "ActionRegistry",
    "ActionResult",
    "OneShotActions",
    "build_registry",
]
