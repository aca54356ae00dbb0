"""
Provider base interfaces and abstract classes.

This module defines the abstraction the encyclopedia adapter implements:
- Consistent interface for remote lookups
- Health check capabilities
- Standardized error handling
"""

from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Any
from dataclasses import dataclass
from enum import Enum
import time
import logging


class ProviderStatus(Enum):
    """Provider health status."""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


@dataclass
class HealthCheckResult:
    """Result of a provider health check."""
    status: ProviderStatus
    latency_ms: float
    message: str
    details: Optional[Dict[str, Any]] = None

    @property
    def is_healthy(self) -> bool:
        """Check if provider is healthy."""
        return self.status == ProviderStatus.HEALTHY

    def to_dict(self) -> Dict[str, Any]:
        return {
            'status': self.status.value,
            'latency_ms': round(self.latency_ms, 1),
            'message': self.message,
            'details': self.details or {},
        }


@dataclass
class ProviderMetadata:
    """Metadata about a provider."""
    name: str
    version: str
    description: str
    capabilities: List[str]
    rate_limit: Optional[int] = None  # requests per minute


class Provider(ABC):
    """Base provider interface.

    Remote lookups are read-only and idempotent. "Not found" is reported as
    None or an empty list; transport failures raise ProviderError.
    """

    def __init__(self):
        """Initialize the provider."""
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    async def search(self, query: str, **kwargs) -> List[Any]:
        """Search for content based on query.

        Raises:
            ProviderError: If search fails
        """

    @abstractmethod
    async def get_metadata(self) -> ProviderMetadata:
        """Get provider metadata."""

    async def health_check(self) -> HealthCheckResult:
        """Check provider health.

        Default implementation attempts a simple search.
        """
        start_time = time.time()
        try:
            await self.search("test", limit=1)
            latency_ms = (time.time() - start_time) * 1000
            return HealthCheckResult(
                status=ProviderStatus.HEALTHY,
                latency_ms=latency_ms,
                message=f"Provider {self.__class__.__name__} is healthy",
                details={"latency_ms": latency_ms}
            )
        except Exception as e:
            latency_ms = (time.time() - start_time) * 1000
            return HealthCheckResult(
                status=ProviderStatus.UNHEALTHY,
                latency_ms=latency_ms,
                message=f"Provider health check failed: {str(e)}",
                details={"error": str(e)}
            )


class ProviderError(Exception):
    """Base exception for provider errors."""

    def __init__(self, message: str, provider_name: Optional[str] = None, details: Optional[Dict] = None):
        """Initialize provider error.

        Args:
            message: Error message
            provider_name: Name of the provider that failed
            details: Additional error details
        """
        super().__init__(message)
        self.provider_name = provider_name
        self.details = details or {}


class ProviderNotAvailableError(ProviderError):
    """Raised when a provider is not available."""
    pass


class ProviderRateLimitError(ProviderError):
    """Raised when provider rate limit is exceeded."""
    pass


class ProviderTimeoutError(ProviderError):
    """Raised when provider request times out."""
    pass
