"""Request parameter container."""

from __future__ import annotations

from collections.abc import Iterator, Mapping

from rtm_api.exceptions import ConfigurationError


class ParameterSet:
    """Mapping of parameter name to string value.

    Inserting an existing name overwrites the previous value. Storage order
    carries no meaning; ``to_ordered_pairs`` gives the order used for signing.

    Example:
        >>> params = ParameterSet({"yxz": "foo"})
        >>> params.put("abc", "baz")
        >>> params.to_ordered_pairs()
        [('abc', 'baz'), ('yxz', 'foo')]
    """

    def __init__(self, values: Mapping[str, str] | None = None):
        self._values: dict[str, str] = {}
        if values:
            for name, value in values.items():
                self.put(name, value)

    def put(self, name: str, value: str) -> None:
        """Set ``name`` to ``value``, replacing any previous value."""
        if not isinstance(name, str) or not name:
            raise ConfigurationError(f"Invalid parameter name: {name!r}")
        if not isinstance(value, str):
            raise ConfigurationError(
                f"Parameter {name!r} must be a string, got {type(value).__name__}"
            )
        self._values[name] = value

    def remove(self, name: str) -> None:
        """Remove ``name`` if present."""
        self._values.pop(name, None)

    def get(self, name: str, default: str | None = None) -> str | None:
        return self._values.get(name, default)

    def to_ordered_pairs(self) -> list[tuple[str, str]]:
        """Return (name, value) pairs sorted by name in code point order."""
        return sorted(self._values.items())

    def copy(self) -> ParameterSet:
        return ParameterSet(self._values)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParameterSet):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"ParameterSet({self._values!r})"
