# reportflow/core/service_base.py
"""
Base class for long-lived services owned by the application lifespan.

Services share one lifecycle:
- initialize() once (idempotent), which validates config and builds the resource
- health_check() for the metrics endpoint
- shutdown() to release the resource, never raising
"""
from abc import ABC, abstractmethod
from typing import Optional, Dict, Any, TypeVar, Generic
import logging

from reportflow.core.exceptions import ServiceError, ConfigurationError, service_error

ConfigType = TypeVar('ConfigType')


class ServiceConfig:
    """Base configuration class for services"""
    pass


class BaseService(ABC, Generic[ConfigType]):
    """
    Abstract base for lifespan-managed services.

    Subclasses build their resource (a client, a background task, ...) in
    _initialize_client() and release it in _cleanup().
    """

    def __init__(
        self,
        config: Optional[ConfigType] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.config = config
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self._initialized = False
        self._client = None
        self.service_name = self.__class__.__name__

    @abstractmethod
    async def _initialize_client(self) -> Any:
        """
        Build the underlying resource.

        May return None when the service is configured off.

        Raises:
            ConfigurationError: If configuration is invalid
        """

    async def initialize(self) -> None:
        """Initialize the service; repeated calls are no-ops"""
        if self._initialized:
            self.logger.debug(f"{self.service_name} already initialized")
            return

        try:
            self.logger.info(f"Initializing {self.service_name}...")
            self._validate_config()
            self._client = await self._initialize_client()
            self._initialized = True
            self.logger.info(f"{self.service_name} initialized successfully")

        except ConfigurationError:
            raise
        except Exception as e:
            error_msg = f"Failed to initialize {self.service_name}"
            self.logger.error(error_msg, exc_info=True)
            raise ServiceError(
                message=error_msg,
                service_name=self.service_name,
                operation="initialize",
                details={'original_error': str(e), 'error_type': type(e).__name__}
            ) from e

    def _validate_config(self) -> None:
        """
        Validate service configuration.

        Override to add service-specific checks.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if self.config is None:
            self.logger.debug(f"No configuration provided for {self.service_name}")

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """
        Report service health.

        Returns:
            Dict with "healthy" (bool), "status" (str) and optional "details"
        """

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def client(self) -> Any:
        """
        The underlying resource.

        Raises:
            ServiceError: If the service is not initialized
        """
        if not self._initialized or self._client is None:
            raise service_error(
                f"{self.service_name} is not initialized. Call initialize() first.",
                self.service_name,
                "client"
            )
        return self._client

    async def shutdown(self) -> None:
        """Release resources; errors are logged, not raised"""
        if not self._initialized:
            return

        try:
            self.logger.info(f"Shutting down {self.service_name}...")
            await self._cleanup()
            self._client = None
            self._initialized = False
            self.logger.info(f"{self.service_name} shut down successfully")

        except Exception:
            self.logger.error(f"Error during {self.service_name} shutdown", exc_info=True)

    async def _cleanup(self) -> None:
        """Service-specific cleanup; override as needed"""
        pass

    def get_metrics(self) -> Dict[str, Any]:
        return {
            "service_name": self.service_name,
            "initialized": self._initialized,
        }
