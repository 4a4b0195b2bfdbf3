from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Hashable, Optional, TypeVar, Union

from enclave_di.domain.enums import Lifetime, Stage
from enclave_di.domain.keys import Key
from enclave_di.domain.models import DependencyMetadata, Message, ProviderLookup

T = TypeVar("T")

KeyLike = Union[Key, Any]


class IProvider(ABC):
    """Abstract interface for anything that supplies instances on demand."""

    @abstractmethod
    def get(self) -> Any:
        """Return an instance."""


# A lookup hands itself out as the provider of its key.
IProvider.register(ProviderLookup)


class IModule(ABC):
    """Abstract interface for a unit of binding configuration."""

    @abstractmethod
    def configure(self, binder: "IBinder") -> None:
        """Declare bindings on the given binder.

        Args:
            binder: The binder collecting this module's declarations.
        """


class IBindingBuilder(ABC):
    """Abstract interface for completing a binding started with IBinder.bind()."""

    @abstractmethod
    def annotated_with(self, qualifier: Hashable) -> "IBindingBuilder":
        """Attach a qualifier to the bound key."""

    @abstractmethod
    def to(self, implementation: KeyLike) -> "IBindingBuilder":
        """Bind to another key, resolved from the same container."""

    @abstractmethod
    def to_instance(self, instance: Any) -> None:
        """Bind to an existing instance."""

    @abstractmethod
    def to_provider(self, provider: IProvider) -> "IBindingBuilder":
        """Bind to a provider whose get() supplies the instance."""

    @abstractmethod
    def to_builder(self, builder: Callable[["IContainer"], Any]) -> "IBindingBuilder":
        """Bind to a function receiving the container and returning the instance."""

    @abstractmethod
    def in_lifetime(self, lifetime: Lifetime) -> None:
        """Set the lifetime of the binding."""

    @abstractmethod
    def as_eager_singleton(self) -> None:
        """Make the binding a singleton built when the container is created."""


class IBinder(ABC):
    """Abstract interface for collecting module declarations."""

    @abstractmethod
    def bind(self, key: KeyLike) -> IBindingBuilder:
        """Start a binding for a key or type."""

    @abstractmethod
    def install(self, module: IModule) -> None:
        """Configure another module on this binder."""

    @abstractmethod
    def add_error(self, error: Union[str, Exception, Message]) -> None:
        """Record a configuration error; creation fails once errors are collected."""

    @abstractmethod
    def get_provider(self, key: KeyLike) -> IProvider:
        """Return a provider that becomes usable once the container is created."""

    @abstractmethod
    def request_injection(self, instance: Any) -> None:
        """Call the instance's @inject methods when the container is created."""

    @abstractmethod
    def with_source(self, source: str) -> "IBinder":
        """Return a binder attributing subsequent declarations to the given source."""

    @abstractmethod
    def skip_sources(self, *module_names: str) -> "IBinder":
        """Return a binder that ignores frames from the given modules when computing sources."""

    @abstractmethod
    def current_stage(self) -> Stage:
        """Return the stage of the container being configured."""


class IContainer(ABC):
    """Abstract interface for dependency injection container operations."""

    @abstractmethod
    def register_singletons(self, dependencies: Dict[KeyLike, Callable[["IContainer"], Any]]) -> None:
        """Register multiple singleton dependencies at once.

        Args:
            dependencies: A dictionary mapping keys or types to their builder functions.
        """

    @abstractmethod
    def register_transients(self, dependencies: Dict[KeyLike, Callable[["IContainer"], Any]]) -> None:
        """Register multiple transient dependencies at once.

        Args:
            dependencies: A dictionary mapping keys or types to their builder functions.
        """

    @abstractmethod
    def resolve(self, key: KeyLike) -> Any:
        """Resolve and return an instance of the requested key or type.

        Args:
            key: The key or type to resolve.
        """

    @abstractmethod
    def construct(self, dependency_type: Any) -> Any:
        """Auto-wire a new instance of a class, ignoring any binding for it."""

    @abstractmethod
    def has_binding(self, key: KeyLike) -> bool:
        """Whether the key is explicitly bound here or in a parent container."""

    @abstractmethod
    def get_provider(self, key: KeyLike) -> IProvider:
        """Return a provider resolving the key from this container."""

    @abstractmethod
    def create_child(self, *modules: IModule) -> "IContainer":
        """Create a child container configured by the given modules."""

    @abstractmethod
    def create_scope(self, parent: Optional["IContainer"] = None) -> "IContainer":
        """Create and return a new scoped container instance.

        Args:
            parent: Container the scope falls back to, instead of this container's parent.
        """

    @abstractmethod
    def scope_of(self, child: "IContainer") -> "IContainer":
        """Return the scope of a child container that lives as long as this scope."""

    @property
    @abstractmethod
    def in_scope(self) -> bool:
        """Whether this container is a scope created by create_scope()."""

    @abstractmethod
    def clear(self) -> None:
        """Clear all registrations and instances from the container."""

    @abstractmethod
    def get_registry_copy(self) -> Dict[Key, DependencyMetadata]:
        """Get a copy of the current registry of dependencies."""

    @property
    @abstractmethod
    def parent(self) -> Optional["IContainer"]:
        """The container this one falls back to, if any."""

    @property
    @abstractmethod
    def stage(self) -> Stage:
        """The stage this container was created in."""


class IResolver(ABC):
    """Abstract interface for dependency resolution operations."""

    @abstractmethod
    def resolve_dependencies(
        self,
        dependency_type: Any,
        container: IContainer,
    ) -> Any:
        """Resolve all constructor dependencies and create instance.

        Args:
            dependency_type: The type to resolve.
            container: The DI container to use for resolving dependencies.

        Returns:
            Instance with all dependencies injected.

        Raises:
            UnresolvableError: If a dependency cannot be resolved.
        """

    @abstractmethod
    def call_with_dependencies(self, function: Callable[..., T], container: IContainer) -> T:
        """Call a function with its annotated parameters resolved from the container.

        Args:
            function: The function (or bound method) to call.
            container: The DI container to use for resolving parameters.
        """


class ILifetimeManager(ABC):
    """Abstract interface for managing dependency lifetimes."""

    @abstractmethod
    def get_or_create(
        self,
        metadata: DependencyMetadata,
        factory: Callable[[], Any],
    ) -> Any:
        """Get existing instance or create a new one based on lifetime.

        Args:
            metadata: The dependency metadata containing registration info.
            factory: A callable to create a new instance if needed.
        """

    @abstractmethod
    def clear_cache(self) -> None:
        """Clear any cached instances managed by this lifetime manager."""

    @abstractmethod
    def clear_scoped_cache(self) -> None:
        """Clear only the scoped instances cache."""
