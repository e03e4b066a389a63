"""
An MkDocs plugin that groups documentation pages into named, ordered collections

Example `mkdocs.yml`:

    plugins:
      - page_collections:
          collections:
            posts: blog/*.md
            news:
              pattern: [news/*.md, "!news/index.md"]
              sort: date:desc
              limit: 10
              metadata: _data/news.yml

Collections are published to `config.extra.collections.<name>` (and
`config.extra.<name>`), and every page template receives its `document`
with `previous` / `next` / `first` / `last` links.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

from mkdocs.config import config_options as c
from mkdocs.config.defaults import MkDocsConfig
from mkdocs.plugins import BasePlugin
from mkdocs.structure.files import Files
from mkdocs.structure.pages import Page
from mkdocs.utils import meta

from plugins.page_collections.builder import collections
from plugins.page_collections.documents import Collection, Document
from plugins.page_collections.errors import CollectionsError
from plugins.page_collections.options import CollectionSpec, normalize_options

# Use MkDocs' plugin logger namespace so debug logs appear only with `--verbose`.
logger = logging.getLogger(f"mkdocs.plugins.{__name__}")


class PageCollectionsPlugin(BasePlugin):
    """MkDocs plugin building page collections from patterns and front matter.

    Configuration options (all optional):
    - collections (dict): collection name -> pattern, list of patterns or a
      mapping with `pattern`, `sort`, `limit`, `refer`, `filter`, `metadata`.
    - metadata_dir (str): directory that collection metadata file paths are
      relative to. Defaults to `docs_dir`.
    - debug (bool): log per-page details (shown with `--verbose`).
    """

    config_scheme = (
        ("collections", c.Type(dict, default={})),
        ("metadata_dir", c.Type(str, default="")),
        ("debug", c.Type(bool, default=False)),
    )

    def __init__(self):
        super().__init__()
        self._specs: Dict[str, CollectionSpec] = {}
        # src_uri -> Document for the current build
        self._documents: Dict[str, Document] = {}
        self._collections: Dict[str, Collection] = {}

    def _dbg(self, msg: str, *args) -> None:
        if not self.config.get("debug", False):
            return
        logger.debug("[page_collections] " + msg, *args)

    def _metadata_dir(self, config: MkDocsConfig) -> Path:
        metadata_dir = self.config.get("metadata_dir") or ""
        docs_dir = Path(config["docs_dir"])
        if not metadata_dir:
            return docs_dir
        path = Path(metadata_dir)
        if path.is_absolute():
            return path
        config_file_path = config.get("config_file_path")
        root = Path(config_file_path).resolve().parent if config_file_path else Path.cwd()
        return root / path

    def on_config(self, config: MkDocsConfig) -> MkDocsConfig:
        """Normalize collection options once per configuration load."""
        base_dir = self._metadata_dir(config)
        self._specs = normalize_options(self.config.get("collections") or {}, base_dir)
        logger.debug(
            f"[page_collections] configured {len(self._specs)} collections: {', '.join(self._specs)}"
        )
        return config

    @staticmethod
    def read_document(file) -> Document:
        """Create a `Document` from a documentation page file and its front matter."""
        source = file.content_string
        markdown, front_matter = meta.get_data(source)
        return Document(contents=markdown, metadata=dict(front_matter), path=file.src_uri, url=file.url)

    def on_files(self, files: Files, config: MkDocsConfig) -> Files:
        documents: Dict[str, Document] = {}
        for file in files:
            if not file.is_documentation_page():
                continue
            documents[file.src_uri] = self.read_document(file)
            self._dbg("read %s (front matter keys: %s)", file.src_uri, list(documents[file.src_uri].metadata))

        errors: List[Optional[BaseException]] = []
        stage = collections(self._specs)
        stage(documents, config["extra"], errors.append)

        error = errors[0] if errors else None
        if error is not None:
            if isinstance(error, CollectionsError):
                raise error
            raise CollectionsError(f"[page_collections] failed to build collections: {error}") from error

        self._documents = documents
        self._collections = config["extra"]["collections"]
        logger.info(
            f"[page_collections] built {len(self._collections)} collections from {len(documents)} pages"
        )
        for name, collection in self._collections.items():
            self._dbg("collection %s: %s", name, [d.path for d in collection])
        return files

    def on_page_context(self, context, page: Page, config: MkDocsConfig, nav):
        """Expose the page's document and its collections to templates."""
        document = self._documents.get(page.file.src_uri)
        context["document"] = document
        if document is None:
            context["page_collections"] = {}
            return context
        context["page_collections"] = {
            name: self._collections[name] for name in document.collection if name in self._collections
        }
        return context
