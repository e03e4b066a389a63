"""
Group documents into named, ordered collections.

One build pass runs three steps over the caller's file map:

1. `resolve_membership` - work out the collections every document belongs
   to (front matter `collection` first, then pattern matches) and the
   unordered member list of every collection.
2. `finalize_collection` - sort, filter, limit and link each collection.
3. `publish_collections` - expose the results in the global metadata, both
   as `metadata["collections"][name]` and as `metadata[name]`.
"""

import logging
from functools import cmp_to_key
from pathlib import Path
from typing import Any, Callable, Dict, List, MutableMapping, Optional, Tuple, Union

from plugins.page_collections.documents import Collection, Document, normalize_membership
from plugins.page_collections.matching import match
from plugins.page_collections.options import (
    CollectionSpec,
    MetadataLoader,
    load_metadata_file,
    normalize_options,
)

log = logging.getLogger(f"mkdocs.plugins.{__name__}")

NAMESPACE = "collections"

Files = MutableMapping[str, Document]
Matcher = Callable[[Tuple[str, ...], List[str]], List[str]]
Done = Callable[[Optional[BaseException]], None]


def discover_collections(files: Files, specs: Dict[str, CollectionSpec]) -> Dict[str, CollectionSpec]:
    """
    Return `specs` extended with default specs for every collection named in
    document front matter but not configured. Configured collections keep
    their order; discovered ones follow in first-seen order.
    """
    discovered = dict(specs)
    for document in files.values():
        for name in normalize_membership(document.metadata.get("collection")):
            if name not in discovered:
                discovered[name] = CollectionSpec(name=name)
    return discovered


def resolve_membership(
    files: Files,
    specs: Dict[str, CollectionSpec],
    matcher: Matcher = match,
) -> Tuple[Dict[str, CollectionSpec], Dict[str, List[Document]]]:
    """
    Update each document's `collection` list and gather collection members.

    Membership order per document is the front matter declaration order,
    followed by pattern-matched collections in declaration order, without
    duplicates. Members are gathered from those final lists, in file map
    order.
    """
    specs = discover_collections(files, specs)
    paths = list(files.keys())

    membership: Dict[str, List[str]] = {
        path: normalize_membership(document.metadata.get("collection"))
        for path, document in files.items()
    }

    for name, spec in specs.items():
        if not spec.patterns:
            continue
        for path in matcher(spec.patterns, paths):
            if path in membership and name not in membership[path]:
                membership[path].append(name)

    members: Dict[str, List[Document]] = {name: [] for name in specs}
    for path, document in files.items():
        names = membership[path]
        if names or "collection" in document.metadata:
            document.collection = names
        if not names:
            continue
        if document.path is None:
            document.path = path
        for name in names:
            members[name].append(document)

    return specs, members


def link_documents(documents: List[Document]) -> None:
    """Set `previous`, `next`, `first` and `last` on each document."""
    if not documents:
        return
    first, last = documents[0], documents[-1]
    last_index = len(documents) - 1
    for i, document in enumerate(documents):
        document.previous = documents[i - 1] if i > 0 else None
        document.next = documents[i + 1] if i < last_index else None
        document.first = first
        document.last = last


def finalize_collection(spec: CollectionSpec, documents: List[Document]) -> Collection:
    """Sort, filter, limit and link the members of one collection."""
    ordered = sorted(documents, key=cmp_to_key(spec.sort))
    ordered = [document for document in ordered if spec.filter(document)]
    if spec.limit is not None:
        ordered = ordered[: spec.limit]

    if spec.refer:
        link_documents(ordered)

    return Collection(spec.name, ordered, metadata=spec.metadata, config=spec)


class CollectionNamespace(dict):
    """The `collections` mapping published by `publish_collections`."""


def publish_collections(metadata: MutableMapping[str, Any], collections: Dict[str, Collection]) -> CollectionNamespace:
    """
    Write collections into the global metadata under the `collections`
    namespace and under their bare names. Both entries hold the same object.

    Bare names published by an earlier run for collections that no longer
    exist are removed.
    """
    previous = metadata.get(NAMESPACE)
    if isinstance(previous, CollectionNamespace):
        for name, stale in previous.items():
            if name not in collections and metadata.get(name) is stale:
                del metadata[name]
    elif previous is not None:
        log.warning(
            f"[page_collections] the '{NAMESPACE}' namespace overwrites the existing global "
            f"metadata key '{NAMESPACE}'"
        )

    namespace = CollectionNamespace()
    metadata[NAMESPACE] = namespace
    for name, collection in collections.items():
        if name == NAMESPACE:
            log.warning(
                f"[page_collections] collection '{name}' is only reachable through the "
                f"'{NAMESPACE}' namespace"
            )
            namespace[name] = collection
            continue
        existing = metadata.get(name)
        if existing is not None and not isinstance(existing, Collection):
            log.warning(
                f"[page_collections] collection '{name}' overwrites the existing global "
                f"metadata key '{name}'"
            )
        namespace[name] = collection
        metadata[name] = collection
    return namespace


def build_collections(
    files: Files,
    metadata: MutableMapping[str, Any],
    specs: Dict[str, CollectionSpec],
    matcher: Matcher = match,
) -> CollectionNamespace:
    """Run one full pass: resolve, finalize and publish."""
    specs, members = resolve_membership(files, specs, matcher)
    log.debug(f"[page_collections] identified {len(specs)} collections: {', '.join(specs)}")

    finalized: Dict[str, Collection] = {}
    for name, spec in specs.items():
        log.debug(f"[page_collections] processing collection '{name}' with options {spec}")
        finalized[name] = finalize_collection(spec, members[name])
        log.debug(f"[page_collections] added {len(finalized[name])} documents to collection '{name}'")

    return publish_collections(metadata, finalized)


def collections(
    options: Optional[Dict[str, Any]] = None,
    base_dir: Optional[Union[str, Path]] = None,
    loader: MetadataLoader = load_metadata_file,
    matcher: Matcher = match,
):
    """
    Create the collection stage for a build pipeline.

    The returned callable takes `(files, metadata, done)`: the mutable map of
    path -> `Document`, the global metadata mapping and a completion callback.
    `done` is called exactly once, with `None` on success or with the error
    that stopped the stage.

    Options are normalized on the first run and reused by later runs, so the
    stage can be re-run over the same files.

    Example:
        stage = collections({
            "posts": "blog/*.md",
            "portfolio": {
                "pattern": "portfolio/*.md",
                "metadata": {"title": "My portfolio"},
                "sort": "date:desc",
            },
        })
        stage(files, metadata, done)
    """
    state: Dict[str, Dict[str, CollectionSpec]] = {}

    def stage(files: Files, metadata: MutableMapping[str, Any], done: Done) -> None:
        try:
            if "specs" not in state:
                state["specs"] = normalize_options(options, base_dir, loader)
            build_collections(files, metadata, state["specs"], matcher)
        except Exception as e:
            done(e)
            return
        done(None)

    stage.__name__ = "collections"
    return stage
