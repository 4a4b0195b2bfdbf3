"""Application layer - Module base classes."""

from abc import abstractmethod
from typing import Any, Optional, Union

from enclave_di.domain import (
    IBinder,
    IBindingBuilder,
    IModule,
    IProvider,
    KeyLike,
    Message,
    NotReadyError,
    ReentrancyError,
    Stage,
)


class BinderMethods:
    """Shortcuts forwarding to the binder returned by binder().

    Subclasses decide which binder is current and when none is.
    """

    @abstractmethod
    def binder(self) -> IBinder:
        """Return the binder currently configuring this module.

        Raises:
            NotReadyError: If the module is not being configured.
        """

    def bind(self, key: KeyLike) -> IBindingBuilder:
        return self.binder().bind(key)

    def install(self, module: IModule) -> None:
        self.binder().install(module)

    def add_error(self, error: Union[str, Exception, Message]) -> None:
        self.binder().add_error(error)

    def request_injection(self, instance: Any) -> None:
        self.binder().request_injection(instance)

    def require_binding(self, key: KeyLike) -> None:
        """Fail container creation unless the key can be resolved."""
        self.binder().get_provider(key)

    def get_provider(self, key: KeyLike) -> IProvider:
        return self.binder().get_provider(key)

    def current_stage(self) -> Stage:
        return self.binder().current_stage()


class AbstractModule(BinderMethods, IModule):
    """Base class for ordinary modules.

    Implement configure_bindings() and use the shortcuts (bind, install, ...)
    inside it; @provides methods are picked up automatically.

    Example:
        >>> class DatabaseModule(AbstractModule):
        ...     def configure_bindings(self):
        ...         self.bind(DatabaseConfig).to_instance(DatabaseConfig(url="sqlite://"))
        ...         self.bind(Database).to(SqliteDatabase).in_lifetime(Lifetime.SINGLETON)
    """

    _binder: Optional[IBinder] = None

    def configure(self, binder: IBinder) -> None:
        if self._binder is not None:
            raise ReentrancyError(self, "already being configured")
        self._binder = binder
        try:
            self.configure_bindings()
        finally:
            self._binder = None

    @abstractmethod
    def configure_bindings(self) -> None:
        """Declare this module's bindings."""

    def binder(self) -> IBinder:
        if self._binder is None:
            raise NotReadyError(f"The binder of {type(self).__name__} is only available inside configure_bindings()")
        return self._binder
