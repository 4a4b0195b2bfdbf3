"""Application layer - Declaration source tracking."""

import os
import sys
from typing import Iterable, Tuple

UNKNOWN_SOURCE = "[unknown source]"


class SourceProvider:
    """Describes where a declaration was made by walking the call stack.

    Frames from this library (and any module named in ``skipped``) are passed
    over, so the reported source is the user's line that declared the binding.

    Example:
        >>> SourceProvider().get()
        'app.modules.configure(modules.py:42)'
    """

    DEFAULT_SKIPPED: Tuple[str, ...] = ("enclave_di", "contextlib")

    def __init__(self, skipped: Iterable[str] = ()) -> None:
        self._skipped = tuple(dict.fromkeys(self.DEFAULT_SKIPPED + tuple(skipped)))

    def plus_skipped(self, *module_names: str) -> "SourceProvider":
        """Return a provider that also skips the given module names."""
        return SourceProvider(self._skipped + module_names)

    def _is_skipped(self, module_name: str) -> bool:
        return any(module_name == name or module_name.startswith(name + ".") for name in self._skipped)

    def get(self) -> str:
        frame = sys._getframe(1)
        while frame is not None:
            module_name = frame.f_globals.get("__name__", "")
            if not self._is_skipped(module_name):
                code = frame.f_code
                return f"{module_name}.{code.co_name}({os.path.basename(code.co_filename)}:{frame.f_lineno})"
            frame = frame.f_back
        return UNKNOWN_SOURCE


def describe_function(function) -> str:
    """Source token for a function, in the same format as SourceProvider.get()."""
    code = function.__code__
    return f"{function.__module__}.{function.__qualname__}({os.path.basename(code.co_filename)}:{code.co_firstlineno})"
