"""In-memory store of attribute definitions keyed by attribute name."""

from __future__ import annotations

from typing import Any, Dict, Iterator, Mapping, Optional

from .models import Attribute, Visibility


class DefinitionStore(Mapping[str, Attribute]):
    """Thread-unsafe mapping from attribute key to :class:`Attribute`.

    Keys are case-sensitive. Entries can be added or overwritten but are
    never removed.
    """

    def __init__(self, attributes: Optional[Mapping[str, Attribute]] = None) -> None:
        self._attributes: Dict[str, Attribute] = dict(attributes or {})

    def __getitem__(self, key: str) -> Attribute:
        return self._attributes[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._attributes)

    def __len__(self) -> int:
        return len(self._attributes)

    def __repr__(self) -> str:
        return f"DefinitionStore({sorted(self._attributes)!r})"

    def get_attribute(self, key: str) -> Optional[Attribute]:
        return self._attributes.get(key)

    def set_attribute(self, key: str, attribute: Attribute) -> None:
        self._attributes[key] = attribute

    def with_visibility(self, visibility: Visibility) -> "DefinitionStore":
        return filter_by_visibility(self, visibility)

    def copy(self) -> "DefinitionStore":
        return DefinitionStore(self._attributes)

    def current_values(self) -> Dict[str, str]:
        return {key: attr.current for key, attr in self._attributes.items()}

    def to_document(self) -> Dict[str, Dict[str, Any]]:
        return {key: attr.to_document() for key, attr in self._attributes.items()}


def filter_by_visibility(
    store: Mapping[str, Attribute], visibility: Visibility
) -> DefinitionStore:
    """Return a new store holding only the entries with *visibility*."""
    visibility = Visibility(visibility)
    return DefinitionStore(
        {key: attr for key, attr in store.items() if attr.visibility == visibility}
    )
