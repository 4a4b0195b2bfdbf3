"""Application layer - Gate building a private container exactly once."""

import logging
import threading
from typing import Optional

from enclave_di.domain import CircularDependencyError, IContainer, IModule, Key, NotReadyError

logger = logging.getLogger(__name__)


class Ready:
    """Sentinel returned by a gate once its private container exists.

    Attributes:
        private_container: The container the gate built.
    """

    def __init__(self, private_container: Optional[IContainer] = None) -> None:
        self.private_container = private_container

    def __repr__(self) -> str:
        return "Ready"


class ReadyGate:
    """Builds a private module's container the first time it is opened.

    The gate is bound as an eager singleton in the public container, so the
    private container is built while the public one is being created, and
    every forwarding provider opens it before reading a private value.

    Attributes:
        key: The unique key the gate is bound to.
        private_container: The child container, once built.
    """

    def __init__(self, private_module: IModule, key: Key, owner: str = "private module") -> None:
        self._private_module: Optional[IModule] = private_module
        self._lock = threading.RLock()
        self._opening = False
        self._ready: Optional[Ready] = None
        self._failure: Optional[Exception] = None
        self._owner = owner
        self.key = key
        self.private_container: Optional[IContainer] = None

    @property
    def is_open(self) -> bool:
        return self._ready is not None

    def open(self, public_container: IContainer) -> Ready:
        """Build the private container as a child of the public one, once.

        Later calls return the same sentinel, or raise the error of the failed build.

        Raises:
            CreationError: If the private container cannot be created.
            CircularDependencyError: If building the private container needs the gate itself.
        """
        with self._lock:
            if self._ready is not None:
                return self._ready
            if self._failure is not None:
                raise self._failure
            if self._opening:
                raise CircularDependencyError([self.key, self.key])
            if self._private_module is None:
                raise NotReadyError(f"The private declarations of {self._owner} were never captured")

            logger.debug("Opening gate %s: building private container of %s", self.key, self._owner)
            self._opening = True
            try:
                self.private_container = public_container.create_child(self._private_module)
            except Exception as e:
                self._failure = e
                raise
            finally:
                self._opening = False
                self._private_module = None

            self._ready = Ready(self.private_container)
            return self._ready
