"""Agent host and its process-wide accessor."""

from oneshot_agent.agent.host import AgentHost
from oneshot_agent.agent.session import Runtime, build_agent, build_runtime, get_agent, reset_agent

__all__ = ["AgentHost", "Runtime", "build_agent", "build_runtime", "get_agent", "reset_agent"]
