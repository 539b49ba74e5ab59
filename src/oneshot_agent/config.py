"""Configuration system for oneshot-agent.

Loads settings from a YAML file (``oneshot-agent.yaml`` by default), supports
environment variable expansion, and can fall back to the plain environment
variables used by the hosted web app.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

from oneshot_agent.exceptions import ConfigurationError


DEFAULT_CONFIG_FILE = "oneshot-agent.yaml"
CONFIG_ENV_VAR = "ONESHOT_AGENT_CONFIG"


# ---------------------------------------------------------------------------
# Environment-variable expansion helper
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)\}")


def _expand_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` placeholders with their environment values.

    If the variable is not set the placeholder is left as-is so that
    validation can catch it later.
    """

    def _replace(match: re.Match) -> str:
        var_name = match.group(1)
        return os.environ.get(var_name, match.group(0))

    return _ENV_VAR_RE.sub(_replace, value)


def _expand_env_recursive(obj: object) -> object:
    """Walk an arbitrary nested structure and expand env vars in strings."""
    if isinstance(obj, str):
        return _expand_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _expand_env_recursive(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_expand_env_recursive(item) for item in obj]
    return obj


def is_unresolved(value: str) -> bool:
    return not value or bool(_ENV_VAR_RE.search(value))


# ---------------------------------------------------------------------------
# Pydantic v2 models
# ---------------------------------------------------------------------------


class OneShotConfig(BaseModel):
    """Credentials and endpoint for the 1Shot execution API."""

    api_key: str = ""
    api_secret: str = ""
    business_id: str = ""
    base_url: str = "https://api.1shotapi.com/v0"
    timeout_seconds: float = 30.0

    def require_credentials(self) -> None:
        missing = [
            name
            for name in ("api_key", "api_secret", "business_id")
            if is_unresolved(getattr(self, name))
        ]
        if missing:
            raise ConfigurationError(
                f"1Shot API settings missing: {', '.join(missing)}. "
                "Set them under 'oneshot:' in the config file or via "
                "ONESHOT_API_KEY / ONESHOT_API_SECRET / ONESHOT_BUSINESS_ID."
            )


class LLMProviderConfig(BaseModel):
    """Configuration for a single LLM provider (Anthropic, OpenAI, etc.)."""

    api_key: str = ""
    model: str = ""
    base_url: Optional[str] = None  # For OpenAI-compatible endpoints
    max_tokens: int = 4096


class LLMConfig(BaseModel):
    """LLM configuration that can hold multiple providers."""

    default_provider: str = "openai"
    openai: Optional[LLMProviderConfig] = None
    anthropic: Optional[LLMProviderConfig] = None
    max_iterations: int = 15  # tool-call loops per user message


class WalletConfig(BaseModel):
    """The locally held signing key and the chain it transacts on."""

    chain: str = "base-sepolia"
    rpc_url: Optional[str] = None  # Overrides the chain table's RPC endpoint
    private_key: str = ""
    keystore_dir: Optional[str] = None
    keystore_password: str = ""

    @property
    def has_signing_key(self) -> bool:
        """True when a key or keystore is set and not an unexpanded ${VAR}."""
        return not is_unresolved(self.private_key) or not is_unresolved(self.keystore_dir or "")


class PollingConfig(BaseModel):
    """Bounds for waiting on a remotely executed transaction."""

    interval_seconds: float = 2.0
    max_attempts: int = 150          # 0 = unlimited
    max_elapsed_seconds: float = 0.0  # 0 = unlimited


class DelegationConfig(BaseModel):
    """Overrides for the delegation framework contract addresses.

    Empty values fall back to the deterministic deployment addresses in
    :mod:`oneshot_agent.delegation.environment`.
    """

    delegation_manager: str = ""
    allowed_targets_enforcer: str = ""
    allowed_methods_enforcer: str = ""
    timestamp_enforcer: str = ""


class ServerConfig(BaseModel):
    """HTTP endpoint settings."""

    host: str = "127.0.0.1"
    port: int = 8420


class AppConfig(BaseModel):
    """Root configuration object."""

    oneshot: OneShotConfig = Field(default_factory=OneShotConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    wallet: WalletConfig = Field(default_factory=WalletConfig)
    polling: PollingConfig = Field(default_factory=PollingConfig)
    delegation: DelegationConfig = Field(default_factory=DelegationConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @classmethod
    def from_env(cls) -> AppConfig:
        """Build a config purely from environment variables."""
        env = os.environ
        llm = LLMConfig(
            default_provider=env.get("LLM_PROVIDER", "openai"),
            openai=LLMProviderConfig(
                api_key=env.get("OPENAI_API_KEY", ""),
                model=env.get("OPENAI_MODEL", "gpt-4o-mini"),
                base_url=env.get("OPENAI_BASE_URL") or None,
            ),
        )
        if env.get("ANTHROPIC_API_KEY"):
            llm.anthropic = LLMProviderConfig(
                api_key=env["ANTHROPIC_API_KEY"],
                model=env.get("ANTHROPIC_MODEL", "claude-sonnet-4-5"),
            )
        return cls(
            oneshot=OneShotConfig(
                api_key=env.get("ONESHOT_API_KEY", ""),
                api_secret=env.get("ONESHOT_API_SECRET", ""),
                business_id=env.get("ONESHOT_BUSINESS_ID", ""),
                base_url=env.get("ONESHOT_API_URL", OneShotConfig().base_url),
            ),
            llm=llm,
            wallet=WalletConfig(
                chain=env.get("NETWORK_ID", "base-sepolia"),
                rpc_url=env.get("RPC_URL") or None,
                private_key=env.get("PRIVATE_KEY", ""),
            ),
        )


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------


def load_config(path: Path) -> AppConfig:
    """Load and validate a configuration from a YAML file.

    Environment variable placeholders (``${VAR}``) are expanded before
    validation.
    """
    raw_text = path.read_text(encoding="utf-8")
    raw_data = yaml.safe_load(raw_text) or {}
    expanded = _expand_env_recursive(raw_data)
    return AppConfig.model_validate(expanded)


def save_config(config: AppConfig, path: Path) -> None:
    """Serialize an :class:`AppConfig` to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(mode="python", exclude_none=True)
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(data, fh, default_flow_style=False, sort_keys=False)


def resolve_config(path: Path | None = None) -> AppConfig:
    """Find and load the active configuration.

    Resolution order: explicit *path*, ``$ONESHOT_AGENT_CONFIG``,
    ``./oneshot-agent.yaml``, then :meth:`AppConfig.from_env`.
    """
    if path is None and os.environ.get(CONFIG_ENV_VAR):
        path = Path(os.environ[CONFIG_ENV_VAR])
    if path is None:
        candidate = Path.cwd() / DEFAULT_CONFIG_FILE
        if candidate.exists():
            path = candidate
    if path is None:
        return AppConfig.from_env()
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")
    return load_config(path)
