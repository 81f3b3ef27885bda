"""Load a committee discussion dataset from its JSON-LD export.

Only the field names the explorer needs are read:

    hasPart[]            clusters (@id, name, description)
      itemListElement[]  ideas (@id, text)
      cx:threads[]       threads (@id, name, summary, ref:idea)
        cx:comments[]    comments (@id, author, startTime, text)
    cx:edges[]           relations (from, to, relation)

Everything else in the document is ignored.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from .errors import DatasetError
from .models import Cluster, Comment, Dataset, Idea, Relation, Thread

logger = logging.getLogger(__name__)


def _items(node: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    value = node.get(key) or []
    if not isinstance(value, list):
        logger.debug("Ignoring non-list %r in %s", key, node.get("@id", "<root>"))
        return []
    return [item for item in value if isinstance(item, dict)]


def _comment_from_dict(node: Dict[str, Any]) -> Comment:
    return Comment(
        id=str(node.get("@id", "")),
        author=str(node.get("author", "")),
        start_time=str(node.get("startTime", "")),
        text=str(node.get("text", "")),
    )


def _thread_from_dict(node: Dict[str, Any]) -> Thread:
    idea_ref = node.get("ref:idea")
    if isinstance(idea_ref, dict):
        idea_ref = idea_ref.get("@id")
    return Thread(
        id=str(node.get("@id", "")),
        name=str(node.get("name", "")),
        summary=str(node.get("summary", "")),
        idea_ref=str(idea_ref) if idea_ref else None,
        comments=tuple(_comment_from_dict(c) for c in _items(node, "cx:comments")),
    )


def _cluster_from_dict(node: Dict[str, Any]) -> Cluster:
    return Cluster(
        id=str(node.get("@id", "")),
        name=str(node.get("name", "")),
        description=str(node.get("description", "")),
        ideas=tuple(
            Idea(id=str(i.get("@id", "")), text=str(i.get("text", "")))
            for i in _items(node, "itemListElement")
        ),
        threads=tuple(_thread_from_dict(t) for t in _items(node, "cx:threads")),
    )


def dataset_from_dict(data: Dict[str, Any]) -> Dataset:
    """Build a Dataset from an already-decoded JSON-LD document.

    Raises:
        DatasetError: If the document is not an object or has no clusters list
    """
    if not isinstance(data, dict):
        raise DatasetError(f"Expected a JSON object, got {type(data).__name__}")
    if "hasPart" not in data:
        raise DatasetError("Dataset has no 'hasPart' cluster list")

    relations = tuple(
        Relation(
            source=str(e.get("from", "")),
            target=str(e.get("to", "")),
            relation=str(e.get("relation", "")),
        )
        for e in _items(data, "cx:edges")
    )
    keywords = data.get("keywords") or []

    return Dataset(
        clusters=tuple(_cluster_from_dict(c) for c in _items(data, "hasPart")),
        relations=relations,
        name=str(data.get("name", "")),
        keywords=tuple(str(k) for k in keywords) if isinstance(keywords, list) else (),
    )


def load_dataset(path: Path) -> Dataset:
    """Read and parse a dataset file.

    Args:
        path: Path to the JSON-LD export

    Returns:
        Parsed Dataset

    Raises:
        DatasetError: If the file is missing, unreadable or malformed
    """
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise DatasetError(f"Cannot read dataset {path}: {e}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise DatasetError(f"Invalid JSON in {path}: {e}") from e

    dataset = dataset_from_dict(data)
    logger.debug(
        "Loaded dataset %s: %d clusters, %d relations",
        path, len(dataset.clusters), len(dataset.relations),
    )
    return dataset
