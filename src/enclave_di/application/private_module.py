"""Application layer - Private modules.

A private module configures its bindings in a container of their own and
forwards only the keys it exposes to the container that installs it::

    class PaymentsModule(PrivateModule):
        def configure_private_bindings(self):
            self.bind(HttpClient).to_instance(HttpClient(timeout=5))
            self.bind(PaymentGateway).to(StripeGateway).in_lifetime(Lifetime.SINGLETON)
            self.expose(PaymentGateway)

    container = create_container(PaymentsModule())
    container.resolve(PaymentGateway)   # works
    container.resolve(HttpClient)       # never the private instance

Installing the module runs configure() twice on the same instance: once for
the public binder, which in turn records the module again in private mode.
The public pass checks every exposure against the recorded bindings, binds a
forwarding provider for each, and binds a gate as an eager singleton. Opening
the gate while the public container is created builds the private container
as its child.
"""

import logging
import threading
from abc import abstractmethod
from typing import List, Optional

from enclave_di.application.elements import ReplayModule, bound_keys, get_elements
from enclave_di.application.exposure import Exposure, ExposureLedger
from enclave_di.application.gate import Ready, ReadyGate
from enclave_di.application.module import BinderMethods
from enclave_di.application.provider_methods import ProviderMethodScanner
from enclave_di.application.sources import SourceProvider
from enclave_di.domain import (
    Declaration,
    IBinder,
    IModule,
    IProvider,
    Key,
    KeyLike,
    Message,
    ModuleState,
    NotReadyError,
    ReentrancyError,
    UnboundExposureError,
    UniqueQualifier,
)

logger = logging.getLogger(__name__)


class PrivateModule(BinderMethods, IModule):
    """Base class for modules whose bindings are hidden except for exposed keys.

    Implement configure_private_bindings(); inside it, bind as usual and call
    expose() for each key the enclosing container may see. @provides methods
    are bound privately, and also exposed when marked @exposed.

    Attributes:
        _state: Where the current configuration pass is.
        _ledger: Exposures of the current pass, None when no pass is running.
        _private_binder: The private binder, set only while the private phase runs.
        _ready_provider: Provider of the current pass's gate.
        _captured: Whether the private phase already ran in the current pass.
    """

    scan_provider_methods = False

    _state: ModuleState = ModuleState.IDLE
    _ledger: Optional[ExposureLedger] = None
    _private_binder: Optional[IBinder] = None
    _ready_provider: Optional[IProvider] = None
    _captured: bool = False

    @property
    def _configure_lock(self) -> threading.RLock:
        # Created on first use so subclasses need not call super().__init__().
        return self.__dict__.setdefault("_enclave_configure_lock", threading.RLock())

    @property
    def state(self) -> ModuleState:
        return self._state

    def configure(self, binder: IBinder) -> None:
        """Configure the public side, or the private side when called back during capture.

        Raises:
            ReentrancyError: If called while the private phase is running, after
                the private phase of the current pass, or after a previous
                re-entrant call left the module unusable.
        """
        with self._configure_lock:
            if self._state == ModuleState.IDLE:
                self._configure_public(binder)
            elif self._state == ModuleState.CAPTURING and self._private_binder is None and not self._captured:
                self._configure_private(binder)
            elif self._state == ModuleState.ERROR:
                raise ReentrancyError(self, "unusable after a re-entrant configuration")
            else:
                self._state = ModuleState.ERROR
                raise ReentrancyError(self)

    def _configure_public(self, public_binder: IBinder) -> None:
        ready_key = Key.of(Ready, UniqueQualifier())
        self._ready_provider = public_binder.with_source(self._describe()).get_provider(ready_key)
        self._ledger = ExposureLedger(self._ready_provider)
        self._captured = False
        self._state = ModuleState.CAPTURING
        try:
            # Calls configure() again on this instance, in private mode.
            private_elements = get_elements(self, stage=public_binder.current_stage())

            self._state = ModuleState.WIRING
            private_elements = self._report_private_errors(public_binder, private_elements)
            self._wire_exposures(public_binder, private_elements)

            gate = ReadyGate(ReplayModule(private_elements), ready_key, owner=type(self).__name__)
            public_binder.with_source(self._describe()).bind(ready_key).to_builder(gate.open).as_eager_singleton()
        finally:
            self._ledger = None
            self._ready_provider = None
            self._captured = False
            if self._state != ModuleState.ERROR:
                self._state = ModuleState.IDLE

    @staticmethod
    def _report_private_errors(public_binder: IBinder, private_elements: List[Declaration]) -> List[Declaration]:
        # Private errors fail public creation together with every other configuration error.
        remaining = []
        for element in private_elements:
            if isinstance(element, Message):
                public_binder.add_error(element)
            else:
                remaining.append(element)
        return remaining

    def _wire_exposures(self, public_binder: IBinder, private_elements: List[Declaration]) -> None:
        privately_bound = bound_keys(private_elements)
        wired = 0
        for exposure in self._ledger:
            if exposure.key not in privately_bound:
                error = UnboundExposureError(exposure.key, exposure.source)
                public_binder.add_error(Message(source=exposure.source, message=str(error), cause=error))
                continue
            exposure.configure(public_binder)
            wired += 1
        logger.debug(
            "%s: exposed %d of %d keys from %d private declarations",
            type(self).__name__,
            wired,
            len(self._ledger),
            len(private_elements),
        )

    def _configure_private(self, private_binder: IBinder) -> None:
        self._private_binder = private_binder
        try:
            self.configure_private_bindings()

            for provider_method in ProviderMethodScanner().get_provider_methods(self, private_binder):
                provider_method.configure(private_binder)
                if provider_method.exposed:
                    self._ledger.request_exposure(provider_method.key, provider_method.source)

            for exposure in self._ledger:
                exposure.init_private_provider(private_binder)
            self._captured = True
        finally:
            self._private_binder = None

    @abstractmethod
    def configure_private_bindings(self) -> None:
        """Declare the private bindings and expose the keys to forward."""

    def expose(self, key: KeyLike) -> Exposure:
        """Forward a privately bound key (or type) to the enclosing container.

        Returns:
            The exposure, which accepts one qualifier through annotated_with().

        Raises:
            NotReadyError: If called outside configure_private_bindings().

        Example:
            >>> self.expose(Database).annotated_with("billing")
        """
        if self._private_binder is None or self._ledger is None:
            raise NotReadyError(f"Cannot expose {Key.of(key)}, private module is not ready")
        return self._ledger.request_exposure(Key.of(key), SourceProvider().get())

    def binder(self) -> IBinder:
        if self._private_binder is None:
            raise NotReadyError(
                f"The private binder of {type(self).__name__} is only available inside configure_private_bindings()"
            )
        return self._private_binder

    def _describe(self) -> str:
        return f"{type(self).__module__}.{type(self).__qualname__}"
