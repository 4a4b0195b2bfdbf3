"""Application layer - Declaration capture and replay."""

from typing import Iterable, List, Set

from enclave_di.application.binder import RecordingBinder
from enclave_di.domain import Declaration, IBinder, IModule, Key, Registration, Stage


def get_elements(*modules: IModule, stage: Stage = Stage.DEVELOPMENT) -> List[Declaration]:
    """Record the declarations of the given modules without building anything.

    Args:
        *modules: Modules to install, in order.
        stage: Stage reported to the modules through current_stage().

    Returns:
        The declarations in encounter order.

    Example:
        >>> elements = get_elements(DatabaseModule())
        >>> [e.key for e in elements if isinstance(e, Registration)]
    """
    binder = RecordingBinder(stage)
    for module in modules:
        binder.install(module)
    return binder.finish()


def bound_keys(elements: Iterable[Declaration]) -> Set[Key]:
    """Return the keys bound by the given declarations; other declarations are ignored."""
    return {element.key for element in elements if isinstance(element, Registration)}


class ReplayModule(IModule):
    """Module that replays previously recorded declarations onto a binder.

    Provider lookups are re-issued on the new binder and linked, so providers
    handed out during the original recording start working once the container
    built from this module exists.
    """

    scan_provider_methods = False

    def __init__(self, elements: Iterable[Declaration]) -> None:
        self._elements = list(elements)

    @property
    def elements(self) -> List[Declaration]:
        return list(self._elements)

    def configure(self, binder: IBinder) -> None:
        for element in self._elements:
            element.apply_to(binder)

    def __repr__(self) -> str:
        return f"ReplayModule({len(self._elements)} elements)"
