from typing import Any, Callable, Dict, Optional

from enclave_di.domain import (
    DependencyMetadata,
    DIException,
    ILifetimeManager,
    Key,
    Lifetime,
    ScopeError,
    UnresolvableError,
)


class LifetimeManager(ILifetimeManager):
    """Manages instance lifetimes for singleton, transient, and scoped dependencies.

    A manager created with a parent singleton cache belongs to a scope: it
    shares the root's singletons and keeps its own scoped instances. A root
    manager refuses scoped registrations.

    Attributes:
        _singleton_cache: Cache for singleton instances.
        _scoped_cache: Cache for scoped instances (per scope context).
    """

    def __init__(self, parent_singleton_cache: Optional[Dict[Key, Any]] = None) -> None:
        """Initialize the lifetime manager with empty caches.

        Args:
            parent_singleton_cache: Singleton cache of the root container, for scopes.
        """
        self._in_scope = parent_singleton_cache is not None
        self._singleton_cache: Dict[Key, Any] = parent_singleton_cache if self._in_scope else {}
        self._scoped_cache: Dict[Key, Any] = {}

    @property
    def in_scope(self) -> bool:
        return self._in_scope

    def get_or_create(self, metadata: DependencyMetadata, factory: Callable[[], Any]) -> Any:
        """Get existing instance or create new one based on lifetime.

        Args:
            metadata: Registration metadata containing lifetime info.
            factory: Function to create new instance if needed.

        Returns:
            Instance according to lifetime rules:
            - Singleton: Returns cached instance or creates and caches new one
            - Transient: Always creates new instance
            - Scoped: Returns cached instance within scope or creates new one

        Raises:
            ScopeError: If a scoped dependency is requested outside of a scope.
            UnresolvableError: If the factory fails with a non-DI error.
        """
        lifetime = metadata.registration.lifetime
        key = metadata.registration.key

        if lifetime == Lifetime.SINGLETON:
            if key not in self._singleton_cache:
                self._singleton_cache[key] = self._create(key, factory)
            return self._singleton_cache[key]

        if lifetime == Lifetime.SCOPED:
            if not self._in_scope:
                raise ScopeError(f"{key} is scoped and cannot be resolved outside of a scope")
            if key not in self._scoped_cache:
                self._scoped_cache[key] = self._create(key, factory)
            return self._scoped_cache[key]

        return self._create(key, factory)

    @staticmethod
    def _create(key: Key, factory: Callable[[], Any]) -> Any:
        try:
            return factory()
        except DIException:
            raise
        except Exception as e:
            raise UnresolvableError(key, f"Failed to create instance: {str(e)}") from e

    def clear_cache(self) -> None:
        """Clear all cached instances (singletons and scoped)."""
        self._singleton_cache.clear()
        self._scoped_cache.clear()

    def clear_scoped_cache(self) -> None:
        """Clear only the scoped instance cache.

        Useful when ending a scope (e.g., end of HTTP request).
        """
        self._scoped_cache.clear()

    def get_singleton_cache(self) -> Dict[Key, Any]:
        """Get reference to singleton cache for scope inheritance."""
        return self._singleton_cache
