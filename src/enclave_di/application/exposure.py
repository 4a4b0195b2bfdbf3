"""Application layer - Exposure ledger of private modules."""

from typing import Any, Hashable, Iterator, List, Optional

from enclave_di.domain import AlreadyAnnotatedError, IBinder, IContainer, IProvider, Key, NotReadyError


class Exposure(IProvider):
    """A key a private module forwards to the enclosing container.

    Returned by PrivateModule.expose() so a qualifier can be attached once.
    The key is finalized the first time it is read, after which it no longer
    changes. The exposure is also the provider behind the public binding:
    get() forces the gate, which builds the private container on first use,
    then reads from the private container. Resolutions from a scope of the
    enclosing container read from the matching scope of the private container.

    Attributes:
        source: Where expose() was called.
    """

    def __init__(self, key: Key, source: str, ready_provider: IProvider) -> None:
        self._pending_key = key
        self._final_key: Optional[Key] = None
        self._ready_provider = ready_provider
        self._private_provider: Optional[IProvider] = None
        self.source = source

    def annotated_with(self, qualifier: Hashable) -> None:
        """Attach a qualifier to the exposed key.

        Raises:
            AlreadyAnnotatedError: If the key already has a qualifier or is finalized.
        """
        if self._final_key is not None:
            raise AlreadyAnnotatedError(self._final_key)
        if self._pending_key.has_qualifier:
            raise AlreadyAnnotatedError(self._pending_key)
        self._pending_key = self._pending_key.with_qualifier(qualifier)

    @property
    def key(self) -> Key:
        if self._final_key is None:
            self._final_key = self._pending_key
        return self._final_key

    def init_private_provider(self, private_binder: IBinder) -> None:
        """Look up the exposed key on the private binder."""
        self._private_provider = private_binder.with_source(self.source).get_provider(self.key)

    def configure(self, public_binder: IBinder) -> None:
        """Bind the exposed key in the public binder to this exposure."""
        public_binder.with_source(self.source).bind(self.key).to_builder(self.provide)

    def get(self) -> Any:
        self._ready_provider.get()
        if self._private_provider is None:
            raise NotReadyError(f"{self.key} was exposed but never looked up in its private module")
        return self._private_provider.get()

    def provide(self, container: IContainer) -> Any:
        """Serve the exposed key to the container resolving it."""
        if not container.in_scope:
            return self.get()
        ready = self._ready_provider.get()
        if self._private_provider is None:
            raise NotReadyError(f"{self.key} was exposed but never looked up in its private module")
        return container.scope_of(ready.private_container).resolve(self.key)

    def __repr__(self) -> str:
        return f"Exposure({self._final_key or self._pending_key}, source={self.source!r})"


class ExposureLedger:
    """Exposures requested during one configuration pass of a private module.

    Attributes:
        _ready_provider: Provider of the pass's gate, shared by every exposure.
        _exposures: Exposures in request order.
    """

    def __init__(self, ready_provider: IProvider) -> None:
        self._ready_provider = ready_provider
        self._exposures: List[Exposure] = []

    def request_exposure(self, key: Key, source: str) -> Exposure:
        exposure = Exposure(key, source, self._ready_provider)
        self._exposures.append(exposure)
        return exposure

    def __iter__(self) -> Iterator[Exposure]:
        return iter(list(self._exposures))

    def __len__(self) -> int:
        return len(self._exposures)
