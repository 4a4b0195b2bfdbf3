import itertools
from typing import Any, Hashable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

_unique_ids = itertools.count(1)


class UniqueQualifier:
    """Qualifier that is only ever equal to itself.

    Used to reserve a binding slot nobody else can bind or look up by accident.
    """

    __slots__ = ("_id",)

    def __init__(self) -> None:
        self._id = next(_unique_ids)

    def __repr__(self) -> str:
        return f"@Unique({self._id})"


class Key(BaseModel):
    """Value object identifying a binding slot.

    Attributes:
        dependency_type: The bound type (a class or a typing construct).
        qualifier: Optional hashable value distinguishing bindings of the same type.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    dependency_type: Any = Field(..., description="The type identified by this key.")
    qualifier: Optional[Any] = Field(default=None, description="Optional qualifier for the type.")

    @field_validator("qualifier")
    @classmethod
    def _qualifier_must_be_hashable(cls, value: Any) -> Any:
        if value is not None and not isinstance(value, Hashable):
            raise ValueError(f"Qualifier {value!r} is not hashable")
        return value

    @classmethod
    def of(cls, dependency_type: Union["Key", Any], qualifier: Optional[Hashable] = None) -> "Key":
        """Build a key from a type, or return an existing key unchanged.

        Args:
            dependency_type: A type, or an already built key.
            qualifier: Optional qualifier; not allowed together with a key.

        Example:
            >>> Key.of(Database)
            >>> Key.of(Database, "replica")
        """
        if isinstance(dependency_type, Key):
            if qualifier is not None:
                raise ValueError(f"{dependency_type} already carries its qualifier")
            return dependency_type
        return cls(dependency_type=dependency_type, qualifier=qualifier)

    @property
    def has_qualifier(self) -> bool:
        return self.qualifier is not None

    @property
    def type_name(self) -> str:
        if isinstance(self.dependency_type, type):
            return self.dependency_type.__name__
        return repr(self.dependency_type)

    def with_qualifier(self, qualifier: Hashable) -> "Key":
        """Return a copy of this key carrying the given qualifier."""
        return Key(dependency_type=self.dependency_type, qualifier=qualifier)

    def __str__(self) -> str:
        if self.qualifier is None:
            return f"Key[type={self.type_name}]"
        return f"Key[type={self.type_name}, qualifier={self.qualifier!r}]"
