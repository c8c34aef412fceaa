"""A value that is either everything (`All`) or some specific `T`."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

T = TypeVar("T")

_ALL: Any = object()


class AllOrSome(Generic[T]):
    """Either `All` (anything allowed) or `Some(value)`. Defaults to `All`."""

    __slots__ = ("_value",)

    def __init__(self, value: T = _ALL) -> None:
        self._value = value

    @classmethod
    def all(cls) -> AllOrSome[T]:
        """Construct the `All` variant."""
        return cls()

    @classmethod
    def some(cls, value: T) -> AllOrSome[T]:
        """Construct the `Some` variant holding `value`."""
        return cls(value)

    def is_all(self) -> bool:
        """Return whether this is the `All` variant."""
        return self._value is _ALL

    def is_some(self) -> bool:
        """Return whether this is the `Some` variant."""
        return not self.is_all()

    @property
    def value(self) -> T | None:
        """The held value for `Some`, or None for `All`."""
        return None if self.is_all() else self._value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AllOrSome):
            return NotImplemented
        if self.is_all() or other.is_all():
            return self.is_all() and other.is_all()
        return self._value == other._value

    def __hash__(self) -> int:
        return hash(None) if self.is_all() else hash(("some", self._value))

    def __repr__(self) -> str:
        return "AllOrSome.all()" if self.is_all() else f"AllOrSome.some({self._value!r})"