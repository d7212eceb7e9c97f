"""
Quote provider exceptions.

Per-symbol errors are resolved to placeholder quotes inside the adapters;
batch-level errors are resolved by the orchestrator moving down the chain.
"""

from __future__ import annotations

from typing import Optional


class ProviderError(Exception):
    """Base class for quote provider failures."""

    code: str = "PROVIDER_ERROR"

    def __init__(
        self,
        message: str = "",
        *,
        provider: Optional[str] = None,
        symbol: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.symbol = symbol


class ProviderNetworkError(ProviderError):
    """Transport failure, timeout or unexpected HTTP status."""

    code = "PROVIDER_NETWORK_ERROR"


class ProviderQuotaExceeded(ProviderError):
    """Upstream explicitly signalled throttling."""

    code = "PROVIDER_QUOTA_EXCEEDED"


class ProviderDataError(ProviderError):
    """Malformed or empty payload for a symbol."""

    code = "PROVIDER_DATA_ERROR"


class ConfigurationError(ProviderError):
    """Provider is missing a credential and cannot be used."""

    code = "PROVIDER_NOT_CONFIGURED"
