"""
Normalization of the per-collection options into `CollectionSpec` records.

Accepted shapes for each collection value:

- a pattern string or a list of patterns (shorthand for `{"pattern": value}`)
- a dict with any of `pattern`, `sort`, `limit`, `refer`, `filter`, `metadata`
- `None` / empty dict (all defaults; membership comes from front matter only)
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple, Union

import yaml

from plugins.page_collections.errors import ConfigurationError, MetadataLoadError

log = logging.getLogger(f"mkdocs.plugins.{__name__}")

OPTION_KEYS = ("pattern", "sort", "limit", "refer", "filter", "metadata")
SORT_ORDERS = ("asc", "desc")
# Direction used when a sort string has no `:asc` / `:desc` suffix
DEFAULT_SORT_ORDER = "desc"
DEFAULT_SORT_KEY = "path"

Comparator = Callable[[Any, Any], int]
MetadataLoader = Callable[[Path], Any]


def sortable(value: Any) -> Any:
    """Promote dates to naive UTC datetimes so mixed date values compare."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return value


def compare_values(a: Any, b: Any) -> int:
    """
    Three-way comparison of two present sort values. Values of types that
    cannot be ordered against each other fall back to ordering by type name,
    then by their string form.
    """
    a, b = sortable(a), sortable(b)
    try:
        return (a > b) - (a < b)
    except TypeError:
        a_key = (type(a).__name__, str(a))
        b_key = (type(b).__name__, str(b))
        return (a_key > b_key) - (a_key < b_key)


def sort_by(key_path: str, order: str = "asc") -> Comparator:
    """
    Build a comparator ordering documents by the value at `key_path`.

    Missing or falsy values are the least: they come first in ascending
    order and last in descending order. Two missing values compare equal.
    """
    if order not in SORT_ORDERS:
        raise ValueError(f"unknown sort order '{order}', expected one of {SORT_ORDERS}")
    direction = 1 if order == "asc" else -1

    def compare(a, b) -> int:
        a_value = a.lookup(key_path)
        b_value = b.lookup(key_path)
        if not a_value and not b_value:
            result = 0
        elif not a_value:
            result = -1
        elif not b_value:
            result = 1
        else:
            result = compare_values(a_value, b_value)
        return result * direction

    compare.__name__ = f"sort_by_{key_path}_{order}"
    compare.key_path = key_path
    compare.order = order
    return compare


def accept_all(document) -> bool:
    return True


def default_sort() -> Comparator:
    return sort_by(DEFAULT_SORT_KEY, "asc")


@dataclass(frozen=True)
class CollectionSpec:
    """Canonical options for one named collection."""

    name: str
    patterns: Tuple[str, ...] = ()
    sort: Comparator = field(default_factory=default_sort, repr=False)
    filter: Callable[[Any], bool] = field(default=accept_all, repr=False)
    limit: Optional[int] = None
    refer: bool = True
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def sort_description(self) -> str:
        key_path = getattr(self.sort, "key_path", None)
        if key_path is None:
            return getattr(self.sort, "__name__", repr(self.sort))
        return f"{key_path}:{self.sort.order}"


def load_metadata_file(path: Path) -> Any:
    """Parse a JSON or YAML file (JSON is read as YAML)."""
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def parse_sort(name: str, sort: Union[str, Comparator, None]) -> Comparator:
    """Turn a `"key[:asc|desc]"` string or a comparator into a comparator."""
    if sort is None:
        return default_sort()
    if callable(sort):
        return sort
    if isinstance(sort, str):
        key_path, sep, order = sort.partition(":")
        key_path = key_path.strip()
        order = order.strip().lower() if sep else DEFAULT_SORT_ORDER
        if not key_path:
            raise ConfigurationError(name, f"sort '{sort}' has no key")
        if order not in SORT_ORDERS:
            raise ConfigurationError(
                name, f"sort '{sort}' has unknown order '{order}', expected 'asc' or 'desc'"
            )
        return sort_by(key_path, order)
    raise ConfigurationError(
        name, f"sort must be a 'key:asc|desc' string or a comparator, got {type(sort).__name__}"
    )


def parse_patterns(name: str, pattern: Any) -> Tuple[str, ...]:
    if pattern is None:
        return ()
    if isinstance(pattern, str):
        pattern = [pattern]
    if not isinstance(pattern, (list, tuple)) or not all(isinstance(p, str) for p in pattern):
        raise ConfigurationError(name, "pattern must be a string or a list of strings")
    return tuple(p for p in (p.strip() for p in pattern) if p)


def parse_limit(name: str, limit: Any) -> Optional[int]:
    if limit is None:
        return None
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise ConfigurationError(name, f"limit must be a positive integer, got {limit!r}")
    return limit


def resolve_metadata(
    name: str,
    metadata: Any,
    base_dir: Optional[Union[str, Path]] = None,
    loader: MetadataLoader = load_metadata_file,
) -> Dict[str, Any]:
    """Return the collection metadata dict, loading it from disk for path strings."""
    if metadata is None:
        return {}
    if isinstance(metadata, dict):
        return dict(metadata)
    if not isinstance(metadata, str):
        raise ConfigurationError(
            name, f"metadata must be a mapping or a file path, got {type(metadata).__name__}"
        )

    root = Path(base_dir) if base_dir else Path.cwd()
    abs_path = (root / metadata).resolve()
    if not abs_path.is_file():
        raise MetadataLoadError(
            name, abs_path, f'No collection metadata file at "{abs_path}" (collection \'{name}\')'
        )

    try:
        data = loader(abs_path)
    except Exception as e:
        raise MetadataLoadError(
            name, abs_path, f"Unable to parse collection metadata file \"{abs_path}\" (collection '{name}'): {e}"
        ) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise MetadataLoadError(
            name,
            abs_path,
            f"Collection metadata file \"{abs_path}\" (collection '{name}') must contain a mapping, "
            f"got {type(data).__name__}",
        )
    log.debug(f"[page_collections] loaded metadata for '{name}' from {abs_path}")
    return data


def normalize_collection(
    name: str,
    raw: Any,
    base_dir: Optional[Union[str, Path]] = None,
    loader: MetadataLoader = load_metadata_file,
) -> CollectionSpec:
    """Normalize a single collection value into a `CollectionSpec`."""
    if isinstance(raw, CollectionSpec):
        return raw
    if raw is None:
        raw = {}
    elif isinstance(raw, (str, list, tuple)):
        raw = {"pattern": raw}
    elif not isinstance(raw, dict):
        raise ConfigurationError(
            name, f"expected a pattern, a list of patterns or a mapping, got {type(raw).__name__}"
        )

    unknown = [key for key in raw if key not in OPTION_KEYS]
    if unknown:
        raise ConfigurationError(name, f"unknown option(s): {', '.join(map(str, unknown))}")

    refer = raw.get("refer", True)
    if not isinstance(refer, bool):
        raise ConfigurationError(name, f"refer must be a boolean, got {refer!r}")

    filter_ = raw.get("filter")
    if filter_ is None:
        filter_ = accept_all
    elif not callable(filter_):
        raise ConfigurationError(name, "filter must be a callable taking a document")

    return CollectionSpec(
        name=name,
        patterns=parse_patterns(name, raw.get("pattern")),
        sort=parse_sort(name, raw.get("sort")),
        filter=filter_,
        limit=parse_limit(name, raw.get("limit")),
        refer=refer,
        metadata=resolve_metadata(name, raw.get("metadata"), base_dir, loader),
    )


def normalize_options(
    options: Optional[Dict[str, Any]],
    base_dir: Optional[Union[str, Path]] = None,
    loader: MetadataLoader = load_metadata_file,
) -> Dict[str, CollectionSpec]:
    """Normalize every configured collection, preserving declaration order."""
    if options is None:
        return {}
    if not isinstance(options, dict):
        raise ConfigurationError("*", f"collections must be a mapping, got {type(options).__name__}")

    normalized: Dict[str, CollectionSpec] = {}
    for name, raw in options.items():
        name = str(name)
        normalized[name] = normalize_collection(name, raw, base_dir, loader)
    return normalized
