import inspect
from typing import Annotated, Any, Callable, Dict, TypeVar, get_args, get_origin, get_type_hints

from enclave_di.domain import DIException, IContainer, IResolver, Key, UnresolvableError

T = TypeVar("T")


def key_for_hint(hint: Any) -> Key:
    """Translate a parameter type hint into a key.

    ``Annotated[Database, "replica"]`` becomes ``Key.of(Database, "replica")``;
    only the first metadata item is used as the qualifier.
    """
    if get_origin(hint) is Annotated:
        dependency_type, qualifier, *_ = get_args(hint)
        return Key.of(dependency_type, qualifier)
    return Key.of(hint)


class DependencyResolver(IResolver):
    """Resolves dependencies using constructor introspection and type hints.

    Uses Python's inspect module to analyze signatures and resolve each
    parameter from the container by its (optionally Annotated) type hint.
    """

    def resolve_dependencies(self, dependency_type: Any, container: IContainer) -> Any:
        """Resolve all constructor dependencies and create instance.

        Args:
            dependency_type: The class to instantiate.
            container: The container to resolve dependencies from.

        Returns:
            Instance with all dependencies injected.

        Raises:
            UnresolvableError: If the type is not a concrete class, or a parameter
                cannot be resolved or lacks a type hint.

        Example:
            >>> class UserService:
            ...     def __init__(self, db: DatabaseConnection, logger: Logger):
            ...         self.db = db
            ...         self.logger = logger
            >>>
            >>> resolver = DependencyResolver()
            >>> instance = resolver.resolve_dependencies(UserService, container)
        """
        if not isinstance(dependency_type, type):
            raise UnresolvableError(dependency_type, "Only classes can be auto-wired; register a builder for it.")
        if inspect.isabstract(dependency_type):
            raise UnresolvableError(dependency_type, "Abstract classes cannot be auto-wired; bind an implementation.")

        try:
            kwargs = self._resolve_parameters(dependency_type.__init__, container, dependency_type)
            return dependency_type(**kwargs)
        except DIException:
            raise
        except Exception as e:
            raise UnresolvableError(
                dependency_type,
                f"Failed to auto-wire constructor for {dependency_type}: {e}",
            ) from e

    def call_with_dependencies(self, function: Callable[..., T], container: IContainer) -> T:
        """Call a function with every annotated parameter resolved from the container.

        Parameters with defaults and variadic parameters are left alone.

        Raises:
            UnresolvableError: If a parameter cannot be resolved or lacks a type hint.
        """
        kwargs = self._resolve_parameters(function, container, function)
        return function(**kwargs)

    def _resolve_parameters(self, function: Callable[..., Any], container: IContainer, owner: Any) -> Dict[str, Any]:
        signature = inspect.signature(function)
        type_hints = get_type_hints(function, include_extras=True)

        kwargs: Dict[str, Any] = {}
        for param_name, param in signature.parameters.items():
            if param_name == "self":
                continue
            if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue
            if param.default is not inspect.Parameter.empty:
                continue
            if param_name not in type_hints:
                raise UnresolvableError(
                    owner,
                    f"Parameter '{param_name}' lacks type hint and has no default value.",
                )

            try:
                kwargs[param_name] = container.resolve(key_for_hint(type_hints[param_name]))
            except UnresolvableError as e:
                raise UnresolvableError(
                    owner,
                    f"Failed to resolve dependency for parameter '{param_name}': {e}",
                ) from e
        return kwargs
