from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from enclave_di.domain.enums import Lifetime
from enclave_di.domain.exceptions import DIException, NotReadyError
from enclave_di.domain.keys import Key

if TYPE_CHECKING:
    from enclave_di.domain.interfaces import IBinder, IContainer, IProvider


class Declaration(BaseModel):
    """A recorded configuration intent, replayable onto any binder.

    Attributes:
        source: Opaque token describing where the declaration was made.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    source: str = Field(..., description="Where the declaration was made.")

    @abstractmethod
    def apply_to(self, binder: "IBinder") -> None:
        """Replay this declaration onto a binder."""


class Registration(Declaration):
    """Value object representing a binding of a key to a builder.

    Attributes:
        key: The key being bound.
        builder: Factory function that receives container and returns instance.
        lifetime: How long the instance should live.
        eager: Whether the instance is built when the container is created.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    key: Key = Field(..., description="The key to be registered.")
    builder: Callable[["IContainer"], Any] = Field(
        ..., description="The builder function to create an instance of the key."
    )
    lifetime: Lifetime = Field(..., description="The lifetime of the registered dependency.")
    eager: bool = Field(default=False, description="Build the instance when the container is created.")

    def apply_to(self, binder: "IBinder") -> None:
        builder = binder.with_source(self.source).bind(self.key).to_builder(self.builder)
        if self.eager:
            builder.as_eager_singleton()
        else:
            builder.in_lifetime(self.lifetime)


class DependencyMetadata(BaseModel):
    """Tracks registration details for a container's registry.

    Attributes:
        registration: The original registration configuration.
        resolution_count: Number of times this dependency has been resolved.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    registration: Registration = Field(..., description="The registration details of the dependency.")
    resolution_count: int = Field(
        default=0,
        description="Number of times this dependency has been resolved.",
    )


class ProviderLookup(Declaration):
    """A request for the provider of a key, fulfilled once a container exists.

    The lookup itself is handed out as the provider. Calling get() before the
    owning container initialized it raises NotReadyError.

    Attributes:
        key: The key whose provider was requested.
    """

    key: Key = Field(..., description="The key whose provider is requested.")

    _delegate: Any = PrivateAttr(default=None)

    @property
    def initialized(self) -> bool:
        return self._delegate is not None

    def initialize(self, delegate: "IProvider") -> None:
        """Connect this lookup to the provider that will serve it.

        Raises:
            DIException: If the lookup was already initialized.
        """
        if self._delegate is not None:
            raise DIException(f"Provider for {self.key} is already initialized")
        self._delegate = delegate

    def get(self) -> Any:
        if self._delegate is None:
            raise NotReadyError(f"Provider for {self.key} cannot be used until its container has been created")
        return self._delegate.get()

    def apply_to(self, binder: "IBinder") -> None:
        self.initialize(binder.with_source(self.source).get_provider(self.key))


class Message(Declaration):
    """An error reported during configuration.

    Attributes:
        message: Human readable description.
        cause: Optional exception describing the failure.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    message: str = Field(..., description="The error message.")
    cause: Optional[Exception] = Field(default=None, description="The exception behind the error, if any.")

    def apply_to(self, binder: "IBinder") -> None:
        binder.add_error(self)

    def __str__(self) -> str:
        return f"{self.message} (at {self.source})"


class InjectionRequest(Declaration):
    """A request to call the @inject methods of an existing instance.

    Attributes:
        instance: The object whose methods receive dependencies.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    instance: Any = Field(..., description="The object to inject.")

    def apply_to(self, binder: "IBinder") -> None:
        binder.with_source(self.source).request_injection(self.instance)
