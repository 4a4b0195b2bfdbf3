from enum import Enum


class Lifetime(str, Enum):
    """Defines the lifetime of a dependency instance.

    Attributes:
        SINGLETON: Single instance shared by the container that owns the binding.
        TRANSIENT: New instance created on each resolution.
        SCOPED: Single instance per scope (e.g., per HTTP request).
    """

    TRANSIENT = "transient"
    SCOPED = "scoped"
    SINGLETON = "singleton"

    def __str__(self) -> str:
        return self.value


class Stage(str, Enum):
    """The stage a container is created in.

    Attributes:
        DEVELOPMENT: Eager singletons are built at creation, other singletons lazily.
        PRODUCTION: Every singleton is built at creation.
        TOOL: Nothing is built at creation; injection requests are skipped.
    """

    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TOOL = "tool"

    def __str__(self) -> str:
        return self.value


class ModuleState(str, Enum):
    """Configuration pass state of a private module instance.

    Attributes:
        IDLE: No pass is running.
        CAPTURING: Private declarations are being recorded.
        WIRING: Exposures are being validated and bound publicly.
        ERROR: A re-entrant configuration was detected; the instance is unusable.
    """

    IDLE = "idle"
    CAPTURING = "capturing"
    WIRING = "wiring"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value
