"""Document records and finalized collections."""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

# Document attributes reachable through a sort key path when the metadata
# doesn't define the same key.
LOOKUP_ATTRIBUTES = ("path", "url")


def normalize_membership(raw: Any) -> List[str]:
    """Normalize a `collection` value into a de-duplicated list of names."""
    if raw is None:
        return []
    if isinstance(raw, str):
        candidates = [raw]
    elif isinstance(raw, (list, tuple)):
        candidates = raw
    else:
        candidates = [raw]

    names: List[str] = []
    for item in candidates:
        if item is None:
            continue
        name = str(item).strip()
        if name and name not in names:
            names.append(name)
    return names


@dataclass(eq=False)
class Document:
    """One input page: its raw contents plus front matter metadata.

    The collection stage mutates documents in place: it rewrites the
    membership list under `metadata["collection"]`, fills in `path` when
    missing, and sets the `previous`/`next`/`first`/`last` links.
    """

    contents: Union[str, bytes] = ""
    metadata: Dict[str, Any] = field(default_factory=dict)
    path: Optional[str] = None
    url: Optional[str] = None
    previous: Optional["Document"] = field(default=None, repr=False)
    next: Optional["Document"] = field(default=None, repr=False)
    first: Optional["Document"] = field(default=None, repr=False)
    last: Optional["Document"] = field(default=None, repr=False)

    # Mapping-style access to metadata, used by filters and templates

    def __getitem__(self, key: str) -> Any:
        return self.metadata[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.metadata[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self.metadata

    def get(self, key: str, default: Any = None) -> Any:
        return self.metadata.get(key, default)

    @property
    def collection(self) -> List[str]:
        return normalize_membership(self.metadata.get("collection"))

    @collection.setter
    def collection(self, names: Iterable[str]) -> None:
        self.metadata["collection"] = list(names)

    def lookup(self, key_path: str) -> Any:
        """Dotted lookup into metadata (dicts and lists), None when absent."""
        keys = [k.strip() for k in key_path.split(".") if k.strip()]
        if not keys:
            return None

        head = keys[0]
        if head in self.metadata:
            value = self.metadata[head]
        elif head in LOOKUP_ATTRIBUTES:
            value = getattr(self, head)
        else:
            return None

        for key in keys[1:]:
            if isinstance(value, dict):
                if key not in value:
                    return None
                value = value[key]
            elif isinstance(value, (list, tuple)) and key.isdigit():
                index = int(key)
                if index >= len(value):
                    return None
                value = value[index]
            else:
                return None
        return value


class Collection(list):
    """A finalized, ordered collection of documents.

    Behaves as a plain list of `Document` objects and additionally carries
    the collection `name`, its resolved `metadata` and the `config` it was
    built from.
    """

    def __init__(self, name: str, documents: Iterable[Document] = (), metadata: Optional[Dict[str, Any]] = None, config: Any = None):
        super().__init__(documents)
        self.name = name
        self.metadata = dict(metadata or {})
        self.config = config

    def __repr__(self) -> str:
        return f"Collection(name={self.name!r}, size={len(self)})"
