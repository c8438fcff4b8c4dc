from typing import Any

from .base import UpstreamProvider
from .providers import OpenAIProvider


def create_upstream_provider(provider: str, **config: Any) -> UpstreamProvider:
    """Create an upstream provider instance.

    This factory function hides the instantiation logic for different providers.

    Args:
        provider: Provider type (only 'openai' is supported)
        **config: Provider-specific configuration
            For OpenAI:
                - api_key: str (required)
                - base_url: str | None
                - organization: str | None
                - use_responses_api: bool (default: True)

    Returns:
        Initialized upstream provider instance

    Raises:
        ValueError: If provider type is not supported
        TypeError: If required configuration is missing

    Examples:
        >>> provider = create_upstream_provider(
        ...     "openai",
        ...     api_key="sk-...",
        ... )
    """
    provider_lower = provider.lower()

    if provider_lower == "openai":
        if "api_key" not in config:
            raise TypeError("OpenAI provider requires 'api_key' in config")
        return OpenAIProvider(**config)

    raise ValueError(
        f"Unsupported provider: {provider}. "
        f"Supported providers: 'openai'"
    )
