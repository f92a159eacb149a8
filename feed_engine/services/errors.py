# Error types raised by the feed engine


class FeedEngineError(Exception):
    """Base class for engine errors"""


class CatalogUnavailableError(FeedEngineError):
    """The catalog could not be fetched; feed composition cannot proceed"""


class OracleUnavailableError(FeedEngineError):
    """The ranking or search oracle is not configured"""


class OracleResponseError(FeedEngineError):
    """The oracle answered with something that is not a list of identifiers"""
