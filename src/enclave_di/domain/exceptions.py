from typing import TYPE_CHECKING, Any, List, Optional, Sequence

if TYPE_CHECKING:
    from enclave_di.domain.keys import Key
    from enclave_di.domain.models import Message


def _describe(target: Any) -> str:
    if isinstance(target, type):
        return target.__name__
    return str(target)


class DIException(Exception):
    """Base exception for DI-related errors."""


class CircularDependencyError(DIException):
    """Raised when a circular dependency is detected.

    Attributes:
        dependency_chain: List of keys (or types) involved in the circular dependency.
    """

    def __init__(self, dependency_chain: List[Any]) -> None:
        self.dependency_chain = dependency_chain
        message = f"Circular dependency detected: {' -> '.join([_describe(item) for item in dependency_chain])}"
        super().__init__(message)


class UnresolvableError(DIException):
    """Raised when a dependency cannot be resolved.

    This occurs when:
    - No registration exists for a qualified key.
    - Constructor parameters lacks type hints.
    - A builder raised while creating the instance.

    Attributes:
        key: The key (or type) that could not be resolved.
        reason: Optional reason for the failure.
    """

    def __init__(self, key: Any, reason: Optional[str] = None) -> None:
        self.key = key
        self.reason = reason
        message = f"Cannot resolve dependency for {_describe(key)}"
        if reason:
            message += f". Reason: {reason}"
        super().__init__(message)


class LifetimeError(DIException):
    """Raised for invalid lifetime configurations.

    This occurs when:
    - Registering the same key with conflicting lifetimes.
    - Invalid lifetime value provided.
    """


class ScopeError(DIException):
    """Raised for invalid scope operations.

    This occurs when:
    - Attempting to resolve a scoped dependency outside of a scope.
    """


class ReentrancyError(DIException):
    """Raised when a private module is configured again while its private phase is active.

    Attributes:
        module: The module instance that was re-entered.
    """

    def __init__(self, module: Any, detail: str = "Re-entry is not allowed.") -> None:
        self.module = module
        super().__init__(f"{type(module).__name__}: {detail}")


class NotReadyError(DIException):
    """Raised when an API is used before the state it needs exists.

    This occurs when:
    - expose() or the private binder API is called outside configure_private_bindings().
    - A looked-up provider is used before its container has been created.
    """


class AlreadyAnnotatedError(DIException):
    """Raised when a qualifier is attached to a key that already has one.

    Attributes:
        key: The key that already carried a qualifier.
    """

    def __init__(self, key: "Key") -> None:
        self.key = key
        super().__init__(f"{key} is already annotated")


class UnboundExposureError(DIException):
    """Describes an exposed key that no private declaration binds.

    Never raised by the library: it is attached as the cause of an accumulated
    creation message so callers can tell these failures apart.

    Attributes:
        key: The exposed key.
        source: Where expose() was called.
    """

    def __init__(self, key: "Key", source: str) -> None:
        self.key = key
        self.source = source
        super().__init__(f"Could not expose() at {source}\n {key} must be explicitly bound.")


class CreationError(DIException):
    """Raised when a container cannot be created.

    Carries every problem found during creation instead of only the first one.

    Attributes:
        messages: The accumulated error messages, in the order they were found.
    """

    def __init__(self, messages: Sequence["Message"]) -> None:
        self.messages = list(messages)
        lines = ["Unable to create container, see the following errors:"]
        for index, message in enumerate(self.messages, start=1):
            lines.append(f"\n{index}) {message.message}\n  at {message.source}")
        lines.append(f"\n{len(self.messages)} error{'' if len(self.messages) == 1 else 's'}")
        super().__init__("\n".join(lines))
