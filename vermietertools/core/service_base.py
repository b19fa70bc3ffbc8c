# vermietertools/core/service_base.py
"""
Base service class for the storage backends of Vermietertools.

Every backend (relational database, Redis) inherits from BaseService to get:
- An explicit lifecycle: opened at process start, closed at shutdown
- Consistent error handling (failures surface as StorageError)
- A health check interface
"""
from abc import ABC, abstractmethod
from typing import Optional, Dict, Any, TypeVar, Generic
import logging
from vermietertools.core.exceptions import StorageError, ConfigurationError

# Type variable for service configuration
ConfigType = TypeVar('ConfigType')


class ServiceConfig:
    """Base configuration class for services"""
    pass


class BaseService(ABC, Generic[ConfigType]):
    """
    Abstract base class for storage services.

    Provides:
    - Lazy, idempotent initialization
    - Consistent error handling
    - Health check interface
    - Resource cleanup
    """

    def __init__(
        self,
        config: Optional[ConfigType] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the service.

        Args:
            config: Service-specific configuration
            logger: Optional logger instance
        """
        self.config = config
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self._initialized = False
        self._client = None

        self.service_name = self.__class__.__name__

    @abstractmethod
    async def _initialize_client(self) -> Any:
        """
        Create the underlying client/connection pool.

        Raises:
            ConfigurationError: If configuration is invalid
            StorageError: If the backend cannot be reached
        """
        pass

    async def initialize(self) -> None:
        """
        Initialize the service.

        This method is idempotent - multiple calls are safe.
        """
        if self._initialized:
            self.logger.debug(f"{self.service_name} already initialized")
            return

        try:
            self.logger.info(f"Initializing {self.service_name}...")

            self._validate_config()
            self._client = await self._initialize_client()
            self._initialized = True

            self.logger.info(f"{self.service_name} initialized successfully")

        except (ConfigurationError, StorageError):
            raise
        except Exception as e:
            error_msg = f"Failed to initialize {self.service_name}"
            self.logger.error(error_msg, exc_info=True)
            raise StorageError(
                service_name=self.service_name,
                operation="initialize",
                message=error_msg,
                details={'original_error': str(e), 'error_type': type(e).__name__}
            ) from e

    def _validate_config(self) -> None:
        """
        Validate service configuration.

        Override this method to add service-specific validation.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if self.config is None:
            raise ConfigurationError(
                f"No configuration provided for {self.service_name}",
                component=self.service_name
            )

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """
        Perform a health check on the service.

        Returns:
            Dict containing:
            - healthy: bool indicating if service is healthy
            - status: string status message
            - details: optional additional information
        """
        pass

    async def ensure_initialized(self) -> None:
        """Call at the start of any public method that needs the client."""
        if not self._initialized:
            await self.initialize()

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def client(self) -> Any:
        """
        Get the underlying client.

        Raises:
            StorageError: If service is not initialized
        """
        if not self._initialized or self._client is None:
            raise StorageError(
                service_name=self.service_name,
                message=f"{self.service_name} is not initialized. Call initialize() first."
            )
        return self._client

    async def shutdown(self) -> None:
        """
        Gracefully shutdown the service and cleanup resources.
        """
        if not self._initialized:
            return

        try:
            self.logger.info(f"Shutting down {self.service_name}...")

            await self._cleanup()

            self._client = None
            self._initialized = False

            self.logger.info(f"{self.service_name} shut down successfully")

        except Exception:
            # Shutdown must not mask the reason the process is stopping
            self.logger.error(f"Error during {self.service_name} shutdown", exc_info=True)

    async def _cleanup(self) -> None:
        """
        Service-specific cleanup logic.

        Override this method to add cleanup for your service.
        """
        pass
