from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

HeaderValues = Union[str, Iterable[str]]


def canonical_key(name: str) -> str:
    """
    Canonical MIME form of a header field name: "content-type" -> "Content-Type".
    Names containing spaces or non-token bytes are returned unchanged.
    """
    name = name.strip()
    if not name or any(c in name for c in " \t:") or not name.isascii():
        return name
    return "-".join(w[:1].upper() + w[1:].lower() for w in name.split("-"))


class Header:
    """
    Case-insensitive mapping of header field name to an ordered list of values.
    A MIME entity may repeat a field, so every name maps to a list.
    """

    def __init__(self, fields: Optional[Union["Header", Mapping[str, HeaderValues], Iterable[Tuple[str, str]]]] = None):
        self._fields: Dict[str, List[str]] = {}
        if fields is None:
            return
        if isinstance(fields, Header):
            items: Iterable[Tuple[str, HeaderValues]] = fields.items()
        elif isinstance(fields, Mapping):
            items = fields.items()
        else:
            items = fields
        for name, value in items:
            if isinstance(value, str):
                self.add(name, value)
            else:
                for v in value:
                    self.add(name, v)

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """First value of `name`, or `default`."""
        values = self._fields.get(canonical_key(name))
        return values[0] if values else default

    def get_all(self, name: str) -> List[str]:
        return list(self._fields.get(canonical_key(name), []))

    def set(self, name: str, value: str) -> None:
        self._fields[canonical_key(name)] = [value]

    def add(self, name: str, value: str) -> None:
        self._fields.setdefault(canonical_key(name), []).append(value)

    def copy(self) -> "Header":
        return Header(self)

    def items(self) -> List[Tuple[str, List[str]]]:
        return [(k, list(v)) for k, v in self._fields.items()]

    def keys(self) -> List[str]:
        return list(self._fields)

    def __getitem__(self, name: str) -> List[str]:
        return list(self._fields[canonical_key(name)])

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and canonical_key(name) in self._fields

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._fields))

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Header):
            return self._fields == other._fields
        if isinstance(other, Mapping):
            return self == Header(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"Header({self._fields!r})"


@dataclass
class Part:
    """
    One leaf of a flattened MIME tree.
    - `header` is the entity's own header set (Content-Type always present).
    - `body` is the payload with the transfer encoding already removed.
    """
    header: Header = field(default_factory=Header)
    body: bytes = b""

    @property
    def content_type(self) -> str:
        return self.header.get("Content-Type", "") or ""
