"""
Dependency Injection Container

Manages service lifecycles and builds sessions wired to the configured
gateway, file saver and event publisher.
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar

from codeshare.config.client_config import ClientConfig
from codeshare.domain.transfer import ErrorClassifier, IFileSaver, ITransferGateway

from .event_publisher import EventPublisher
from .retrieval_session import RetrievalSession
from .upload_session import UploadSession

logger = logging.getLogger(__name__)

T = TypeVar('T')


class DependencyNotFoundError(Exception):
    """Raised when attempting to resolve an unregistered dependency."""
    pass


class DependencyContainer:
    """
    Dependency injection container for managing service lifecycles.

    Supports singleton (single instance) and transient (factory-created)
    registration patterns. Thread-safe for concurrent access.
    """

    def __init__(self, config: Optional[ClientConfig] = None):
        """
        Initialize the dependency container.

        Args:
            config: Client configuration, read from the environment if None
        """
        self._singletons: Dict[Type, Any] = {}
        self._transients: Dict[Type, Callable[[], Any]] = {}
        self._overrides: Dict[Type, Any] = {}
        self._lock = threading.Lock()

        self.config = config or ClientConfig()
        self.register_singleton(ClientConfig, self.config)
        self.register_singleton(ErrorClassifier, ErrorClassifier())
        self.register_singleton(EventPublisher, EventPublisher())

        logger.debug("DependencyContainer initialized")

    def register_singleton(self, interface: Type[T], implementation: T) -> None:
        """
        Register a singleton service (single instance shared across all resolutions).

        Example:
            container.register_singleton(ITransferGateway, gateway)
        """
        with self._lock:
            self._singletons[interface] = implementation
            logger.debug(f"Registered singleton: {interface.__name__}")

    def register_transient(self, interface: Type[T], factory: Callable[[], T]) -> None:
        """
        Register a transient service (new instance created on each resolution).

        Example:
            container.register_transient(UploadSession, container.create_upload_session)
        """
        with self._lock:
            self._transients[interface] = factory
            logger.debug(f"Registered transient: {interface.__name__}")

    def resolve(self, interface: Type[T]) -> T:
        """
        Resolve a registered service.

        Raises:
            DependencyNotFoundError: If the interface is not registered
        """
        with self._lock:
            # Overrides take precedence (for testing)
            if interface in self._overrides:
                return self._overrides[interface]

            if interface in self._singletons:
                return self._singletons[interface]

            if interface in self._transients:
                factory = self._transients[interface]
            else:
                raise DependencyNotFoundError(
                    f"No registration found for type: {interface.__name__}"
                )

        # Call factory outside the lock to allow nested resolve calls
        return factory()

    def override(self, interface: Type[T], implementation: T) -> None:
        """
        Override a registered service (primarily for testing).

        Example:
            container.override(ITransferGateway, fake_gateway)
        """
        with self._lock:
            self._overrides[interface] = implementation
            logger.debug(f"Overridden: {interface.__name__}")

    def clear_overrides(self) -> None:
        """Clear all overrides."""
        with self._lock:
            self._overrides.clear()
            logger.debug("Cleared all overrides")

    def is_registered(self, interface: Type) -> bool:
        with self._lock:
            return (
                interface in self._singletons or
                interface in self._transients or
                interface in self._overrides
            )

    def setup_infrastructure(self) -> None:
        """
        Register the HTTP gateway and the local file saver from configuration.

        Infrastructure imports are deferred so the domain and application
        layers stay importable without the HTTP client installed.
        """
        from codeshare.infrastructure.http_transfer_gateway import HttpTransferGateway
        from codeshare.infrastructure.local_file_saver import LocalFileSaver

        if not self.is_registered(ITransferGateway):
            self.register_singleton(ITransferGateway, HttpTransferGateway.from_config(self.config))
        if not self.is_registered(IFileSaver):
            self.register_singleton(IFileSaver, LocalFileSaver(self.config.download_dir))

        self.register_transient(UploadSession, self.create_upload_session)
        self.register_transient(RetrievalSession, self.create_retrieval_session)

    def create_upload_session(self) -> UploadSession:
        return UploadSession(
            gateway=self.resolve(ITransferGateway),
            event_publisher=self.resolve(EventPublisher),
            classifier=self.resolve(ErrorClassifier),
            max_upload_bytes=self.config.max_upload_bytes,
        )

    def create_retrieval_session(self, initial_code: str = "") -> RetrievalSession:
        return RetrievalSession(
            gateway=self.resolve(ITransferGateway),
            file_saver=self.resolve(IFileSaver),
            event_publisher=self.resolve(EventPublisher),
            classifier=self.resolve(ErrorClassifier),
            initial_code=initial_code,
        )

    def setup_event_handlers(self, event_handler_classes: Optional[List[Type]] = None) -> None:
        """
        Subscribe infrastructure event handlers to all domain events.

        Args:
            event_handler_classes: Handler classes to instantiate and register.
                Defaults to [LoggingEventHandler].
        """
        from codeshare.domain.events import DomainEvent
        from codeshare.infrastructure.event_handlers.logging_handler import LoggingEventHandler

        if event_handler_classes is None:
            event_handler_classes = [LoggingEventHandler]

        publisher = self.resolve(EventPublisher)
        for handler_class in event_handler_classes:
            if handler_class is LoggingEventHandler:
                handler = handler_class(logging.getLogger("codeshare.events"))
            else:
                handler = handler_class()

            publisher.subscribe(DomainEvent, handler.handle)
            logger.debug(f"Registered event handler: {handler_class.__name__}")

    async def aclose(self) -> None:
        """Release resources held by registered infrastructure."""
        with self._lock:
            gateway = self._overrides.get(ITransferGateway) or self._singletons.get(ITransferGateway)
        close = getattr(gateway, "aclose", None)
        if close is not None:
            await close()
