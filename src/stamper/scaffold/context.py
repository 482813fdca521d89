"""The live variable context shared across one generation run.

The pipeline driver owns a single VariableContext. Hooks borrow it
through ``lease()`` and may add or change values; the tree walker only
reads it after ``assert_exclusive()`` has confirmed that no lease is
still outstanding. Keys are never removed: the set only grows.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from types import MappingProxyType

from stamper.errors import UnsupportedValueType
from stamper.models.slots import Value


class VariableContext(Mapping[str, Value]):
    """Mapping of variable name to a string or boolean value."""

    def __init__(self, initial: Mapping[str, Value] | None = None) -> None:
        self._values: dict[str, Value] = {}
        self._leases = 0
        for name, value in (initial or {}).items():
            self.set(name, value)

    def __getitem__(self, name: str) -> Value:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"VariableContext({self._values!r})"

    def set(self, name: str, value: Value) -> None:
        """Insert or replace a value.

        Raises:
            UnsupportedValueType: If value is not a str or bool.
        """
        if not isinstance(value, (str, bool)):
            raise UnsupportedValueType(name, value)
        self._values[name] = value

    def update(self, values: Mapping[str, Value]) -> None:
        for name, value in values.items():
            self.set(name, value)

    def snapshot(self) -> Mapping[str, Value]:
        """Return a read-only copy of the current values."""
        return MappingProxyType(dict(self._values))

    @property
    def leased(self) -> bool:
        return self._leases > 0

    @contextmanager
    def lease(self) -> Iterator[VariableContext]:
        """Lend the context to a hook for in-place mutation."""
        self._leases += 1
        try:
            yield self
        finally:
            self._leases -= 1

    def assert_exclusive(self) -> None:
        """Check that no hook still holds the context.

        Raises:
            RuntimeError: If a lease is outstanding.
        """
        if self._leases:
            raise RuntimeError(
                f"variable context still leased by {self._leases} holder(s)"
            )
