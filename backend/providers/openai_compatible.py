"""Shared provider for all OpenAI-compatible APIs.

OpenAI, DeepSeek, OpenRouter and xAI all speak the OpenAI chat completions
protocol, so each is a thin subclass of OpenAICompatibleProvider that
contributes a catalog and an entry in PROVIDER_CONFIGS.

The only providers NOT handled here are:
- Anthropic: Uses ChatAnthropic (different client)
- Google: Uses ChatGoogleGenerativeAI (different client)
"""

from dataclasses import dataclass

from langchain_core.runnables import Runnable
from langchain_openai import ChatOpenAI

from .base import BaseProvider, CallOptions, ModelConfig


@dataclass
class ProviderConfig:
    """Configuration for an OpenAI-compatible provider.

    Attributes:
        default_base_url: API endpoint URL (None uses OpenAI's default)
        api_key_env_var: Environment variable name for the API key (for error messages)
        default_headers: Custom HTTP headers to include in requests
        default_max_tokens: Completion limit used when the caller sets none
        supports_response_chaining: Whether previous_response_id can be sent
            through the Responses API
    """

    default_base_url: str | None = None
    api_key_env_var: str = ""
    default_headers: dict[str, str] | None = None
    default_max_tokens: int = 2000
    supports_response_chaining: bool = False


# Provider configurations registry, keyed by provider name
PROVIDER_CONFIGS: dict[str, ProviderConfig] = {
    "OpenAI": ProviderConfig(
        api_key_env_var="OPENAI_API_KEY",
        default_max_tokens=16384,
        supports_response_chaining=True,
    ),
    "DeepSeek": ProviderConfig(
        default_base_url="https://api.deepseek.com",
        api_key_env_var="DEEPSEEK_API_KEY",
    ),
    "OpenRouter": ProviderConfig(
        default_base_url="https://openrouter.ai/api/v1",
        api_key_env_var="OPENROUTER_API_KEY",
        default_headers={"HTTP-Referer": "https://modelcompare.app", "X-Title": "ModelCompare"},
    ),
    "xAI": ProviderConfig(
        default_base_url="https://api.x.ai/v1",
        api_key_env_var="GROK_API_KEY",
    ),
}


class OpenAICompatibleProvider(BaseProvider):
    """Base for providers reached through LangChain's ChatOpenAI client.

    Subclasses set ``name`` (a PROVIDER_CONFIGS key) and ``models``.
    """

    def __init__(self, api_key: str = ""):
        """Initialize the provider.

        Raises:
            KeyError: If the subclass name is not in PROVIDER_CONFIGS
        """
        if self.name not in PROVIDER_CONFIGS:
            raise KeyError(
                f"Unknown provider type: {self.name}. "
                f"Valid types: {list(PROVIDER_CONFIGS.keys())}"
            )
        super().__init__(api_key)
        self.provider_config = PROVIDER_CONFIGS[self.name]
        self.api_key_env_var = self.provider_config.api_key_env_var

    def get_llm(self, config: ModelConfig, options: CallOptions) -> Runnable:
        """Return a ChatOpenAI client configured for this provider.

        Raises:
            ProviderError: If the API key is not configured
        """
        api_key = self._require_api_key()

        kwargs: dict = {
            "model": config.model,
            "api_key": api_key,
            "max_tokens": options.max_tokens or self.provider_config.default_max_tokens,
            "stream_usage": True,
        }

        if base_url := self.provider_config.default_base_url:
            kwargs["base_url"] = base_url

        if self.provider_config.default_headers:
            kwargs["default_headers"] = self.provider_config.default_headers

        if config.supports_temperature:
            kwargs["temperature"] = options.temperature if options.temperature is not None else 0.7
        elif options.reasoning_effort and config.capabilities.reasoning:
            # gpt-5 accepts "minimal"; the o-series does not
            effort = options.reasoning_effort
            if effort == "minimal" and not config.model.startswith("gpt-5"):
                effort = "low"
            kwargs["reasoning_effort"] = effort

        if options.previous_response_id and self.provider_config.supports_response_chaining:
            kwargs["use_responses_api"] = True
            return ChatOpenAI(**kwargs).bind(previous_response_id=options.previous_response_id)

        return ChatOpenAI(**kwargs)
