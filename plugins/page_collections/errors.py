from mkdocs.exceptions import PluginError


class CollectionsError(PluginError):
    """Base class for errors raised while building page collections."""


class ConfigurationError(CollectionsError):
    """A collection option has a shape or value that cannot be used."""

    def __init__(self, collection: str, message: str):
        self.collection = collection
        super().__init__(f"[page_collections] collection '{collection}': {message}")


class MetadataLoadError(CollectionsError):
    """A collection metadata file is missing or cannot be parsed."""

    def __init__(self, collection: str, path, message: str):
        self.collection = collection
        self.path = path
        super().__init__(message)
