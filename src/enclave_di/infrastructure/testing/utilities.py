from typing import Any, Callable, Dict, Optional, Tuple

from enclave_di.application import DIContainer
from enclave_di.domain import IContainer, Key, KeyLike, Lifetime, Stage


class TestContainer(DIContainer):
    """DI container for testing with dependency override capabilities.

    Copies the registrations of a parent container and lets tests replace
    individual keys. Keys exposed by private modules can be overridden like
    any other key; the private module's internals keep their own bindings.

    Attributes:
        _parent_container: The container registrations are copied from.
        _overrides: Keys overridden in this container and their replacement.

    Example:
        >>> container = create_container(PaymentsModule(), CheckoutModule())
        >>>
        >>> def test_checkout_charges_card():
        ...     with TestContainer(container) as test_container:
        ...         fake_gateway = FakeGateway()
        ...         test_container.mock_singleton(PaymentGateway, fake_gateway)
        ...         test_container.resolve(CheckoutService).checkout(cart)
        ...         assert fake_gateway.charged
    """

    __test__ = False  # Tell pytest not to collect this class as a test

    def __init__(self, parent_container: Optional[IContainer] = None) -> None:
        super().__init__(
            parent=parent_container.parent if parent_container else None,
            stage=parent_container.stage if parent_container else Stage.DEVELOPMENT,
        )
        self._parent_container = parent_container
        self._overrides: Dict[Key, Any] = {}

        if parent_container:
            self._registry = parent_container.get_registry_copy()

    def _replace(self, key: Key, builder: Callable[[IContainer], Any], lifetime: Lifetime) -> None:
        self._registry.pop(key, None)
        self._lifetime_manager.clear_cache()
        self._register(key, builder, lifetime)

    def mock_singleton(self, key: KeyLike, mock_instance: Any) -> None:
        """Replace a dependency with a mock instance returned on every resolution.

        Example:
            >>> test_container.mock_singleton(Key.of(Database, "replica"), mock_db)
        """
        key = Key.of(key)
        self._overrides[key] = mock_instance
        self._replace(key, lambda c: mock_instance, Lifetime.SINGLETON)

    def mock_transient(self, key: KeyLike, factory: Callable[[], Any]) -> None:
        """Replace a dependency with a factory called on every resolution."""
        key = Key.of(key)
        self._overrides[key] = factory
        self._replace(key, lambda c: factory(), Lifetime.TRANSIENT)

    def override_registration(self, key: KeyLike, builder: Callable[[IContainer], Any], lifetime: Lifetime) -> None:
        """Override a registration with a custom builder and lifetime."""
        key = Key.of(key)
        self._overrides[key] = builder
        self._replace(key, builder, Lifetime(lifetime))

    @property
    def overridden_keys(self) -> Tuple[Key, ...]:
        return tuple(self._overrides)

    def reset_overrides(self) -> None:
        """Remove all overrides and restore parent registrations."""
        self._overrides.clear()
        self._lifetime_manager.clear_cache()
        if self._parent_container:
            self._registry = self._parent_container.get_registry_copy()
        else:
            self._registry.clear()

    def __enter__(self) -> "TestContainer":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        self.reset_overrides()
        self.clear()
        return False


def create_mock_container(*singletons: Tuple[KeyLike, Any]) -> TestContainer:
    """Create a test container with pre-configured mock singletons.

    Example:
        >>> test_container = create_mock_container(
        ...     (DatabaseConnection, mock_db),
        ...     (Key.of(CacheService, "sessions"), mock_cache),
        ... )
    """
    container = TestContainer()

    for key, mock_instance in singletons:
        container.mock_singleton(key, mock_instance)

    return container


class MockScope:
    """Context manager for scoped testing with automatic cleanup.

    Example:
        >>> with MockScope(container) as scoped:
        ...     ctx = scoped.resolve(RequestContext)
        ...     assert scoped.resolve(RequestService).context is ctx
    """

    def __init__(self, parent_container: IContainer) -> None:
        self._parent_container = parent_container
        self._scoped_container: Optional[IContainer] = None

    def __enter__(self) -> IContainer:
        self._scoped_container = self._parent_container.create_scope()
        return self._scoped_container

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        if self._scoped_container:
            self._scoped_container.clear()
            self._scoped_container = None
        return False
