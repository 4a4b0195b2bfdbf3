import inspect
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar, overload

from enclave_di.application.circular_detector import CircularDependencyDetector
from enclave_di.application.lifetime_manager import LifetimeManager
from enclave_di.application.resolver import DependencyResolver
from enclave_di.application.sources import SourceProvider
from enclave_di.domain import (
    DependencyMetadata,
    IContainer,
    IModule,
    IProvider,
    IResolver,
    Key,
    KeyLike,
    Lifetime,
    LifetimeError,
    Registration,
    Stage,
    UnresolvableError,
)

T = TypeVar("T")


class ContainerProvider(IProvider):
    """Provider resolving one key from one container on every get()."""

    def __init__(self, container: IContainer, key: Key) -> None:
        self._container = container
        self._key = key

    def get(self) -> Any:
        return self._container.resolve(self._key)

    def __repr__(self) -> str:
        return f"ContainerProvider({self._key})"


class DIContainer(IContainer):
    """Main dependency injection container.

    Orchestrates registration and resolution of keyed dependencies. Supports
    singleton, transient, and scoped lifetimes with auto-wiring. A container
    may have a parent: keys it does not bind itself are looked up in the
    parent chain, while its own bindings stay invisible to the parent.

    Attributes:
        _registry: Dictionary mapping keys to their metadata.
        _parent: Container consulted for keys not bound here.
        _stage: Stage the container was created in.
        _resolver: Component responsible for auto-wiring dependencies.
        _lifetime_manager: Component managing instance lifetimes.
        _circular_detector: Component detecting circular dependencies.
    """

    def __init__(
        self,
        parent: Optional[IContainer] = None,
        stage: Stage = Stage.DEVELOPMENT,
        lifetime_manager: Optional[LifetimeManager] = None,
    ) -> None:
        """Initialize the DI container with empty registry and domain components.

        Args:
            parent: Optional parent container.
            stage: Stage of the container; children inherit it.
            lifetime_manager: Lifetime manager to use, for scopes sharing singletons.
        """
        self._registry: Dict[Key, DependencyMetadata] = {}
        self._parent = parent
        self._stage = Stage(stage)
        self._resolver: IResolver = DependencyResolver()
        self._lifetime_manager = lifetime_manager or LifetimeManager()
        self._circular_detector = CircularDependencyDetector()
        self._source_provider = SourceProvider()
        self._child_scopes: Dict[IContainer, IContainer] = {}

    @property
    def parent(self) -> Optional[IContainer]:
        return self._parent

    @property
    def stage(self) -> Stage:
        return self._stage

    @property
    def in_scope(self) -> bool:
        return self._lifetime_manager.in_scope

    def add_registration(self, registration: Registration) -> Optional[Registration]:
        """Store a registration unless its key is already bound here.

        Returns:
            The registration already holding the key, or None if stored.
        """
        existing = self._registry.get(registration.key)
        if existing is not None:
            return existing.registration
        self._registry[registration.key] = DependencyMetadata(registration=registration)
        return None

    def _register(
        self,
        key: KeyLike,
        builder: Callable[[IContainer], Any],
        lifetime: Lifetime,
    ) -> None:
        """Internal registration method with validation.

        Raises:
            LifetimeError: If already registered with a different lifetime.
        """
        key = Key.of(key)
        registration = Registration(
            source=self._source_provider.get(),
            key=key,
            builder=builder,
            lifetime=lifetime,
        )
        existing = self.add_registration(registration)
        if existing is not None and existing.lifetime != lifetime:
            raise LifetimeError(
                f"Dependency {key.type_name} is already registered "
                f"with lifetime {existing.lifetime.value}, "
                f"cannot re-register with {lifetime.value}"
            )

    def register_singletons(self, dependencies: Dict[KeyLike, Callable[[IContainer], Any]]) -> None:
        """Register multiple singleton dependencies at once.

        Registering a key again with the same lifetime keeps the first builder.

        Raises:
            LifetimeError: If a dependency is already registered with a different lifetime.

        Example:
            >>> container.register_singletons({
            ...     DatabaseConfig: lambda c: DatabaseConfig.from_env(),
            ...     Key.of(DatabaseConnection, "replica"): lambda c: connect_replica(c.resolve(DatabaseConfig)),
            ... })
        """
        for key, builder in dependencies.items():
            self._register(key, builder, Lifetime.SINGLETON)

    def register_transients(self, dependencies: Dict[KeyLike, Callable[[IContainer], Any]]) -> None:
        """Register multiple transient dependencies at once.

        Raises:
            LifetimeError: If a dependency is already registered with a different lifetime.
        """
        for key, builder in dependencies.items():
            self._register(key, builder, Lifetime.TRANSIENT)

    def register_scoped(self, dependencies: Dict[KeyLike, Callable[[IContainer], Any]]) -> None:
        """Register multiple scoped dependencies at once.

        Scoped dependencies are created once per scope and can only be resolved
        from a container returned by create_scope().

        Raises:
            LifetimeError: If a dependency is already registered with a different lifetime.
        """
        for key, builder in dependencies.items():
            self._register(key, builder, Lifetime.SCOPED)

    @overload
    def resolve(self, key: Type[T]) -> T: ...

    @overload
    def resolve(self, key: Key) -> Any: ...

    def resolve(self, key: Any) -> Any:
        """Resolve and return an instance of the specified key or type.

        Explicit bindings of this container win, then those of the parent
        chain; an unqualified concrete class bound nowhere is auto-wired here.

        Raises:
            UnresolvableError: If the dependency cannot be resolved.
            CircularDependencyError: If a circular dependency is detected.

        Example:
            >>> user_service = container.resolve(UserService)
            >>> replica = container.resolve(Key.of(Database, "replica"))
        """
        key = Key.of(key)
        with self._circular_detector.resolving(key):
            metadata = self._registry.get(key)
            if metadata is not None:
                instance = self._lifetime_manager.get_or_create(
                    metadata,
                    lambda: metadata.registration.builder(self),
                )
                metadata.resolution_count += 1
                return instance

            if self._parent is not None and self._parent.has_binding(key):
                return self._parent.resolve(key)

            if key.has_qualifier:
                raise UnresolvableError(key, "No binding is registered for this qualified key.")
            return self._resolver.resolve_dependencies(key.dependency_type, self)

    def construct(self, dependency_type: Any) -> Any:
        """Auto-wire a new instance of a class, ignoring any binding for it."""
        return self._resolver.resolve_dependencies(dependency_type, self)

    def has_binding(self, key: KeyLike) -> bool:
        """Whether the key is explicitly bound here or in the parent chain."""
        key = Key.of(key)
        if key in self._registry:
            return True
        return self._parent is not None and self._parent.has_binding(key)

    def can_resolve(self, key: KeyLike) -> bool:
        """Whether resolve() has a way to produce the key (without building it)."""
        key = Key.of(key)
        if self.has_binding(key):
            return True
        dependency_type = key.dependency_type
        return not key.has_qualifier and isinstance(dependency_type, type) and not inspect.isabstract(dependency_type)

    def get_provider(self, key: KeyLike) -> IProvider:
        return ContainerProvider(self, Key.of(key))

    def eager_keys(self) -> List[Key]:
        """Keys built at creation: eager singletons, or every singleton in production."""
        return [
            key
            for key, metadata in self._registry.items()
            if metadata.registration.eager
            or (self._stage == Stage.PRODUCTION and metadata.registration.lifetime == Lifetime.SINGLETON)
        ]

    def get_registry_copy(self) -> Dict[Key, DependencyMetadata]:
        """Get a copy of the registry for scope inheritance."""
        return self._registry.copy()

    def set_registry(self, registry: Dict[Key, DependencyMetadata]) -> None:
        """Set the registry from a parent container."""
        self._registry = registry

    def create_child(self, *modules: IModule) -> "DIContainer":
        """Create a child container configured by the given modules.

        The child sees every binding of this container; this container never
        sees the child's bindings.

        Raises:
            CreationError: If the modules' configuration has errors.
        """
        from enclave_di.application.container_builder import ContainerBuilder

        return ContainerBuilder(*modules, stage=self._stage, parent=self).build()

    def create_scope(self, parent: Optional[IContainer] = None) -> "DIContainer":
        """Create a scoped container sharing this container's registrations and singletons.

        Keys bound nowhere in the scope are looked up in this container's
        parent, or in the given parent instead.

        Example:
            >>> with container.create_scope() as scoped:
            ...     ctx1 = scoped.resolve(RequestContext)
            ...     ctx2 = scoped.resolve(RequestContext)
            ...     assert ctx1 is ctx2
        """
        scoped_container = DIContainer(
            parent=parent if parent is not None else self._parent,
            stage=self._stage,
            lifetime_manager=LifetimeManager(parent_singleton_cache=self._lifetime_manager.get_singleton_cache()),
        )
        scoped_container.set_registry(self.get_registry_copy())
        return scoped_container

    def scope_of(self, child: IContainer) -> IContainer:
        """Return the scope of a child container that lives as long as this scope.

        The child scope falls back to this scope, so its bindings may depend on
        scoped keys of this container. It is created on first use and cleared
        with this scope.
        """
        child_scope = self._child_scopes.get(child)
        if child_scope is None:
            child_scope = child.create_scope(parent=self)
            self._child_scopes[child] = child_scope
        return child_scope

    def _clear_child_scopes(self) -> None:
        for child_scope in self._child_scopes.values():
            child_scope.clear()
        self._child_scopes.clear()

    def clear(self) -> None:
        """Clear registrations and cached instances.

        A scope only drops its scoped instances; singletons belong to the root.
        """
        self._registry.clear()
        if self._lifetime_manager.in_scope:
            self._lifetime_manager.clear_scoped_cache()
        else:
            self._lifetime_manager.clear_cache()
        self._circular_detector.clear()
        self._clear_child_scopes()

    def __enter__(self) -> "DIContainer":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        self._lifetime_manager.clear_scoped_cache()
        self._clear_child_scopes()
        return False
