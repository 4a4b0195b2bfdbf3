"""Application layer - Provider method discovery.

Module methods decorated with @provides become bindings; the return annotation
is the bound key and the parameters are resolved from the container on each
call. In a private module, @exposed additionally forwards the key to the
enclosing container.
"""

from typing import TYPE_CHECKING, Any, Callable, Dict, Hashable, List, Optional, TypeVar, get_type_hints

from pydantic import BaseModel, ConfigDict, Field

from enclave_di.application.resolver import DependencyResolver, key_for_hint
from enclave_di.application.sources import describe_function
from enclave_di.domain import IContainer, IModule, Key, Lifetime

if TYPE_CHECKING:
    from enclave_di.domain import IBinder

F = TypeVar("F", bound=Callable[..., Any])

PROVIDES_ATTRIBUTE = "__enclave_provides__"
EXPOSED_ATTRIBUTE = "__enclave_exposed__"
INJECT_ATTRIBUTE = "__enclave_inject__"


class ProvidesMarker(BaseModel):
    """Options given to @provides.

    Attributes:
        qualifier: Qualifier added to the key taken from the return annotation.
        lifetime: Lifetime of the resulting binding.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    qualifier: Optional[Any] = Field(default=None, description="Qualifier for the provided key.")
    lifetime: Lifetime = Field(default=Lifetime.TRANSIENT, description="Lifetime of the provided binding.")


def provides(
    function: Optional[F] = None,
    *,
    qualifier: Optional[Hashable] = None,
    lifetime: Lifetime = Lifetime.TRANSIENT,
) -> Any:
    """Mark a module method as a provider of its return type.

    Example:
        >>> class DatabaseModule(AbstractModule):
        ...     def configure(self, binder):
        ...         pass
        ...
        ...     @provides(lifetime=Lifetime.SINGLETON)
        ...     def connection(self, config: DatabaseConfig) -> Connection:
        ...         return Connection(config.url)
    """
    marker = ProvidesMarker(qualifier=qualifier, lifetime=lifetime)

    def decorator(func: F) -> F:
        setattr(func, PROVIDES_ATTRIBUTE, marker)
        return func

    if function is not None:
        return decorator(function)
    return decorator


def exposed(function: F) -> F:
    """Expose a @provides method of a private module to the enclosing container."""
    setattr(function, EXPOSED_ATTRIBUTE, True)
    return function


def inject(function: F) -> F:
    """Mark a method to be called with resolved arguments by request_injection()."""
    setattr(function, INJECT_ATTRIBUTE, True)
    return function


def find_marked(target: Any, attribute: str) -> Dict[str, Callable[..., Any]]:
    """Find the functions of a class (or of an instance's class) carrying a marker.

    Returns:
        Attribute name -> underlying function, base classes first, with
        overrides in subclasses replacing the inherited entry.
    """
    owner = target if isinstance(target, type) else type(target)
    found: Dict[str, Callable[..., Any]] = {}
    for klass in reversed(owner.__mro__):
        for name, value in vars(klass).items():
            function = getattr(value, "__func__", value)
            if getattr(value, attribute, None) or getattr(function, attribute, None):
                found[name] = function
            elif name in found:
                del found[name]
    return found


class ProviderMethod:
    """A discovered @provides method bound to its module instance.

    Attributes:
        key: The key the method provides.
        lifetime: Lifetime of the binding.
        exposed: Whether the method was marked @exposed.
        source: Location of the method definition.
    """

    def __init__(self, method: Callable[..., Any], key: Key, lifetime: Lifetime, exposed: bool, source: str) -> None:
        self._method = method
        self._resolver = DependencyResolver()
        self.key = key
        self.lifetime = lifetime
        self.exposed = exposed
        self.source = source

    def configure(self, binder: "IBinder") -> None:
        binder.with_source(self.source).bind(self.key).to_builder(self._provide).in_lifetime(self.lifetime)

    def _provide(self, container: IContainer) -> Any:
        return self._resolver.call_with_dependencies(self._method, container)

    def __repr__(self) -> str:
        return f"ProviderMethod({self.key}, lifetime={self.lifetime}, exposed={self.exposed})"


class ProviderMethodScanner:
    """Finds the @provides methods of a module instance."""

    def get_provider_methods(self, module: IModule, binder: "IBinder") -> List[ProviderMethod]:
        """Return the module's provider methods in declaration order.

        Problems (a missing return annotation, @exposed without @provides, a
        qualifier given twice) are reported on the binder and the method is
        skipped.
        """
        methods: List[ProviderMethod] = []
        exposed_only = find_marked(module, EXPOSED_ATTRIBUTE)

        for name, function in find_marked(module, PROVIDES_ATTRIBUTE).items():
            exposed_only.pop(name, None)
            source = describe_function(function)
            marker: ProvidesMarker = getattr(function, PROVIDES_ATTRIBUTE)

            return_hint = get_type_hints(function, include_extras=True).get("return")
            if return_hint is None:
                binder.with_source(source).add_error(
                    f"@provides method {function.__qualname__} must declare its return type."
                )
                continue

            key = key_for_hint(return_hint)
            if marker.qualifier is not None:
                if key.has_qualifier:
                    binder.with_source(source).add_error(
                        f"@provides method {function.__qualname__} declares a qualifier twice."
                    )
                    continue
                key = key.with_qualifier(marker.qualifier)

            methods.append(
                ProviderMethod(
                    method=getattr(module, name),
                    key=key,
                    lifetime=marker.lifetime,
                    exposed=bool(getattr(function, EXPOSED_ATTRIBUTE, False)),
                    source=source,
                )
            )

        for name, function in exposed_only.items():
            binder.with_source(describe_function(function)).add_error(
                f"{function.__qualname__} is marked @exposed but not @provides."
            )
        return methods
