"""Property paths used inside variable expressions, e.g. ``${user.address[0].city}``."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Self


class PartBase:
    pass


@dataclass(slots=True, frozen=True)
class AttributePart(PartBase):
    name: str


@dataclass(slots=True, frozen=True)
class ItemPart(PartBase):
    key: str


@dataclass(slots=True, frozen=True)
class PropertyPath:
    root: str
    parts: tuple[PartBase, ...] = ()

    def __str__(self) -> str:
        result = self.root
        for part in self.parts:
            match part:
                case AttributePart(name):
                    result += f".{name}"
                case ItemPart(key):
                    result += f"[{key}]"
                case _:
                    msg = f"Unknown part type: {type(part)}"
                    raise TypeError(msg)
        return result

    @classmethod
    def parse(cls, path_str: str) -> Self:
        """Parse ``root.attr[key]...`` into a PropertyPath.

        Raises:
            ValueError: If the string is not a well-formed path.

        """
        s = path_str.strip()

        root_len = len(s)
        for sep in (".", "["):
            index = s.find(sep)
            if index != -1 and index < root_len:
                root_len = index
        root = s[:root_len]
        if not root:
            msg = f"Path has no root variable: {path_str!r}"
            raise ValueError(msg)

        parts: list[PartBase] = []
        i = root_len
        while i < len(s):
            if s[i] == ".":  # Attribute access
                i += 1
                start = i
                while i < len(s) and s[i] not in ".[":
                    i += 1
                name = s[start:i]
                if not name:
                    msg = f"Empty attribute name at position {start}: {path_str!r}"
                    raise ValueError(msg)
                parts.append(AttributePart(name=name))
            elif s[i] == "[":  # Item access
                end = s.find("]", i)
                if end == -1:
                    msg = f"Unclosed '[' at position {i}: {path_str!r}"
                    raise ValueError(msg)
                parts.append(ItemPart(key=_unquote(s[i + 1 : end].strip())))
                i = end + 1
            else:
                msg = f"Unexpected character at position {i}: {s[i]}"
                raise ValueError(msg)

        return cls(root=root, parts=tuple(parts))


def _unquote(key: str) -> str:
    if len(key) >= 2 and key[0] == key[-1] and key[0] in "'\"":
        return key[1:-1]
    return key


def _get_member(current: Any, key: str) -> Any:
    if isinstance(current, Mapping):
        if key in current:
            return current[key]
        if key.isdigit():
            return current.get(int(key))
        return None
    if isinstance(current, Sequence) and not isinstance(current, (str, bytes)):
        if not key.isdigit():
            return None
        index = int(key)
        return current[index] if index < len(current) else None
    if key.startswith("_"):
        # Only public attributes are reachable from expressions
        return None
    return getattr(current, key, None)


def get_value_by_parts(data: Any, parts: tuple[PartBase, ...]) -> Any:
    """Walk ``parts`` starting from ``data``.

    Mappings are indexed by key, sequences by integer position and anything else
    (pydantic models, dataclasses, plain objects) by attribute. Attribute and item
    parts are interchangeable. Returns None as soon as a step cannot be taken.
    """
    current: Any = data
    for part in parts:
        if current is None:
            return None
        match part:
            case AttributePart(name):
                current = _get_member(current, name)
            case ItemPart(key):
                current = _get_member(current, key)
            case _:
                msg = f"Unknown part type: {type(part)}"
                raise TypeError(msg)
    return current


def lookup_variable(dictionary: Mapping[str, Any], name: str) -> tuple[str, Any]:
    """Look up an expression name in a flat variable dictionary.

    A name that is itself a key wins. Otherwise the name is read as a property
    path whose root is the variable.

    Returns:
        The variable name the lookup depends on, and the value found (None if
        nothing was found).

    """
    if name in dictionary:
        return name, dictionary[name]
    try:
        path = PropertyPath.parse(name)
    except ValueError:
        return name, None
    if path.root not in dictionary:
        return path.root, None
    return path.root, get_value_by_parts(dictionary[path.root], path.parts)
