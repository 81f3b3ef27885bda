"""Insight Explorer: graph, layout and search over committee discussion clusters."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("congressional-insight-explorer")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"  # Fallback for editable installs without metadata

from .errors import ConfigError, DatasetError, InsightExplorerError  # noqa: F401
from .models import Cluster, Comment, Dataset, Idea, Relation, Thread  # noqa: F401
from .loader import dataset_from_dict, load_dataset  # noqa: F401
from .palette import PaletteCursor  # noqa: F401
from .graph_model import GraphData, GraphEdge, GraphNode, build_graph_model  # noqa: F401
from .geometry import compute_frame  # noqa: F401
from .search import SearchIndex, SearchResult, build_search_index, query  # noqa: F401
from .selection import SelectionCallbacks, SelectionState  # noqa: F401

__all__ = [
    "Cluster",
    "Comment",
    "ConfigError",
    "Dataset",
    "DatasetError",
    "GraphData",
    "GraphEdge",
    "GraphNode",
    "Idea",
    "InsightExplorerError",
    "PaletteCursor",
    "Relation",
    "SearchIndex",
    "SearchResult",
    "SelectionCallbacks",
    "SelectionState",
    "Thread",
    "build_graph_model",
    "build_search_index",
    "compute_frame",
    "dataset_from_dict",
    "load_dataset",
    "query",
    "__version__",
]
