"""HTTP surface for the agent."""

from oneshot_agent.api.server import get_app, run_server

__all__ = ["get_app", "run_server"]
