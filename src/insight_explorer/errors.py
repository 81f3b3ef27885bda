"""Exception types for insight_explorer.

Only configuration and dataset loading raise. Graph building, geometry and
search absorb malformed input (dangling references, coincident endpoints,
empty queries) and return safe defaults instead.
"""


class InsightExplorerError(Exception):
    """Base class for all insight_explorer errors."""

    pass


class ConfigError(InsightExplorerError):
    """Configuration loading or validation error."""

    pass


class DatasetError(InsightExplorerError):
    """Dataset file could not be read or lacks required structure."""

    pass
