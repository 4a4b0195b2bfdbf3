"""Application layer - Circular dependency detection."""

import threading
from contextlib import contextmanager
from typing import Iterator, List

from enclave_di.domain import CircularDependencyError, Key


class CircularDependencyDetector:
    """Detects circular dependencies during resolution.

    Each container owns one detector. Keys being resolved are kept on a
    per-thread stack; meeting a key that is already on the stack is a cycle.
    A cycle through several containers is caught by whichever container sees
    its key twice.

    Attributes:
        _local: Thread-local storage for resolution stacks.
    """

    def __init__(self) -> None:
        self._local = threading.local()

    def _get_stack(self) -> List[Key]:
        if not hasattr(self._local, "stack"):
            self._local.stack = []
        return self._local.stack

    def push(self, key: Key) -> None:
        """Add a key to the resolution stack.

        Raises:
            CircularDependencyError: If the key is already in the stack.
        """
        stack = self._get_stack()
        if key in stack:
            cycle = stack[stack.index(key) :] + [key]
            raise CircularDependencyError(cycle)
        stack.append(key)

    def pop(self) -> None:
        """Remove the most recent key from the resolution stack."""
        stack = self._get_stack()
        if stack:
            stack.pop()

    @contextmanager
    def resolving(self, key: Key) -> Iterator[None]:
        """Keep the key on the stack for the duration of the block.

        Example:
            >>> with detector.resolving(Key.of(ServiceA)):
            ...     build_service_a()
        """
        self.push(key)
        try:
            yield
        finally:
            self.pop()

    @property
    def depth(self) -> int:
        return len(self._get_stack())

    def clear(self) -> None:
        if hasattr(self._local, "stack"):
            self._local.stack.clear()
