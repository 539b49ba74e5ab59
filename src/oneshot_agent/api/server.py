"""FastAPI endpoint for talking to the agent over HTTP."""

from __future__ import annotations

import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from oneshot_agent.agent.host import DEFAULT_THREAD
from oneshot_agent.agent.session import get_agent, reset_agent
from oneshot_agent.config import AppConfig

logger = logging.getLogger("oneshot_agent.api")

_app = FastAPI(title="1Shot Agent")
_config: AppConfig | None = None


class AgentRequest(BaseModel):
    user_message: str = Field(alias="userMessage", min_length=1)
    thread_id: Optional[str] = Field(default=None, alias="threadId")


class AgentResponse(BaseModel):
    response: str


@_app.on_event("shutdown")
async def shutdown():
    await reset_agent()


@_app.post("/api/agent", response_model=AgentResponse)
async def api_agent(body: AgentRequest):
    try:
        agent = await get_agent(_config)
        reply = await agent.chat(body.user_message, thread_id=body.thread_id or DEFAULT_THREAD)
    except Exception as exc:
        logger.exception("Agent request failed")
        return JSONResponse(status_code=500, content={"error": str(exc) or type(exc).__name__})
    return AgentResponse(response=reply)


@_app.get("/api/actions")
async def api_actions():
    try:
        agent = await get_agent(_config)
    except Exception as exc:
        logger.exception("Agent initialisation failed")
        return JSONResponse(status_code=500, content={"error": str(exc) or type(exc).__name__})
    return [
        {"name": a.name, "description": a.description, "parameters": a.parameters}
        for a in agent.registry.list()
    ]


def get_app(config: AppConfig | None = None) -> FastAPI:
    global _config
    _config = config
    return _app


def run_server(config: AppConfig, host: str | None = None, port: int | None = None) -> None:
    uvicorn.run(
        get_app(config),
        host=host or config.server.host,
        port=port or config.server.port,
        log_level="info",
    )
