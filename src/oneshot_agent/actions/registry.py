"""Action registry - the table of capabilities exposed to the agent."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

import httpx
from pydantic import BaseModel, ValidationError

from oneshot_agent.exceptions import ActionValidationError, OneShotAgentError
from oneshot_agent.llm.base import ToolDefinition

logger = logging.getLogger("oneshot_agent.actions")


class ActionResult(BaseModel):
    """Envelope returned by every action, successful or not."""

    success: bool
    result: Any = None
    count: Optional[int] = None
    error: Optional[str] = None
    error_type: Optional[str] = None

    @classmethod
    def ok(cls, result: Any = None, count: int | None = None) -> ActionResult:
        return cls(success=True, result=_plain(result), count=count)

    @classmethod
    def fail(cls, error: str, error_type: str | None = None) -> ActionResult:
        return cls(success=False, error=error, error_type=error_type)

    def to_json(self) -> str:
        return json.dumps(self.model_dump(exclude_none=True), default=str)


def _plain(value: Any) -> Any:
    """Turn API models into the camelCase JSON the agent sees."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


Handler = Callable[[Any], Awaitable[ActionResult]]


@dataclass
class Action:
    name: str
    description: str
    input_model: type[BaseModel]
    handler: Handler

    @property
    def parameters(self) -> dict[str, Any]:
        return self.input_model.model_json_schema(by_alias=True)

    def to_definition(self) -> ToolDefinition:
        return ToolDefinition(
            name=self.name,
            description=self.description,
            parameters=self.parameters,
        )


class ActionRegistry:
    """Maps action names to actions and runs them behind a uniform envelope."""

    def __init__(self) -> None:
        self._actions: dict[str, Action] = {}

    def register(self, action: Action) -> None:
        if action.name in self._actions:
            raise ValueError(f"Action '{action.name}' is already registered")
        self._actions[action.name] = action

    def get(self, name: str) -> Action | None:
        return self._actions.get(name)

    def list(self) -> list[Action]:
        return list(self._actions.values())

    def list_names(self) -> list[str]:
        return list(self._actions.keys())

    def tool_definitions(self) -> list[ToolDefinition]:
        return [a.to_definition() for a in self._actions.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._actions

    def __len__(self) -> int:
        return len(self._actions)

    async def invoke(self, name: str, arguments: dict[str, Any] | None = None) -> ActionResult:
        """Validate *arguments*, run the named action, and never raise for expected failures."""
        action = self._actions.get(name)
        if action is None:
            return ActionResult.fail(f"Unknown action '{name}'", "UnknownAction")

        try:
            args = action.input_model.model_validate(arguments or {})
        except ValidationError as exc:
            logger.warning("Rejected input for %s: %s", name, exc)
            return ActionResult.fail(str(exc), "ValidationError")

        logger.info("Invoking %s(%s)", name, args.model_dump(exclude_none=True))
        try:
            return await action.handler(args)
        except ActionValidationError as exc:
            logger.warning("Rejected input for %s: %s", name, exc)
            return ActionResult.fail(str(exc), "ValidationError")
        except OneShotAgentError as exc:
            logger.error("%s failed: %s", name, exc)
            return ActionResult.fail(str(exc), type(exc).__name__)
        except httpx.HTTPError as exc:
            logger.error("%s transport error: %s", name, exc)
            return ActionResult.fail(str(exc), "RemoteServiceError")
        except Exception as exc:
            logger.exception("Unexpected error in %s", name)
            return ActionResult.fail(str(exc) or "Unknown error", type(exc).__name__)
