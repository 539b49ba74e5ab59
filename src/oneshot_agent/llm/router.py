"""Pick and cache the configured LLM provider."""

from __future__ import annotations

import importlib
import logging

from oneshot_agent.config import LLMConfig, LLMProviderConfig, is_unresolved
from oneshot_agent.exceptions import ConfigurationError
from oneshot_agent.llm.base import BaseLLMProvider

logger = logging.getLogger("oneshot_agent.llm.router")

# Provider name -> implementation, imported on first use.
_PROVIDERS: dict[str, str] = {
    "anthropic": "oneshot_agent.llm.anthropic.AnthropicProvider",
    "openai": "oneshot_agent.llm.openai.OpenAIProvider",
}

_ENV_HINTS = {"anthropic": "ANTHROPIC_API_KEY", "openai": "OPENAI_API_KEY"}


def _load_class(dotted_path: str) -> type[BaseLLMProvider]:
    module_path, class_name = dotted_path.rsplit(".", 1)
    cls = getattr(importlib.import_module(module_path), class_name)
    if not (isinstance(cls, type) and issubclass(cls, BaseLLMProvider)):
        raise TypeError(f"{dotted_path} is not a BaseLLMProvider subclass")
    return cls


class LLMRouter:
    """Creates provider instances lazily, one per provider/model pair."""

    def __init__(self, llm_config: LLMConfig):
        self._config = llm_config
        self._providers: dict[str, BaseLLMProvider] = {}

    def _provider_config(self, name: str) -> LLMProviderConfig:
        block = getattr(self._config, name, None)
        if block is None:
            raise ConfigurationError(
                f"LLM provider '{name}' is not configured; add an 'llm.{name}' section "
                f"or set {_ENV_HINTS.get(name, 'its API key')}."
            )
        return block

    def get_provider(
        self,
        provider_name: str | None = None,
        model_override: str | None = None,
    ) -> BaseLLMProvider:
        """Return the provider for *provider_name* (default from config).

        Raises
        ------
        ConfigurationError
            Unknown provider, missing section, empty API key, or no model.
        """
        name = provider_name or self._config.default_provider
        if name not in _PROVIDERS:
            raise ConfigurationError(
                f"Unknown LLM provider '{name}'. Supported: {sorted(_PROVIDERS)}"
            )

        key = f"{name}:{model_override}" if model_override else name
        if key in self._providers:
            return self._providers[key]

        block = self._provider_config(name)
        if is_unresolved(block.api_key):
            raise ConfigurationError(
                f"I need an API key for '{name}' to power my intelligence. "
                f"Set {_ENV_HINTS[name]} or llm.{name}.api_key."
            )
        model = model_override or block.model
        if not model:
            raise ConfigurationError(f"No model configured for LLM provider '{name}'")

        provider = _load_class(_PROVIDERS[name])(
            api_key=block.api_key,
            model=model,
            base_url=block.base_url,
            max_tokens=block.max_tokens,
        )
        self._providers[key] = provider
        logger.info("Created %s provider (model=%s, base_url=%s)", name, model, block.base_url or "default")
        return provider
