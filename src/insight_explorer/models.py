"""In-memory data model for a committee discussion dataset.

The dataset is immutable once loaded: clusters own their ideas and threads,
threads own their comments, and relations link clusters by id. Nothing here
validates that ids resolve; consumers decide what to do with dangling
references.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple


@dataclass(frozen=True)
class Idea:
    """A single idea raised inside a cluster."""

    id: str
    text: str


@dataclass(frozen=True)
class Comment:
    """A transcript comment attached to a thread.

    Attributes:
        id: Comment identifier
        author: Free-text speaker name or speaker identifier
        start_time: Offset into the recording, ``MM:SS`` or ``H:MM:SS``
        text: What was said
    """

    id: str
    author: str
    start_time: str
    text: str


@dataclass(frozen=True)
class Thread:
    """A discussion thread inside a cluster.

    ``idea_ref`` is a weak reference to an Idea id; it is not required to
    resolve to an idea of the same cluster.
    """

    id: str
    name: str
    summary: str
    idea_ref: Optional[str] = None
    comments: Tuple[Comment, ...] = ()


@dataclass(frozen=True)
class Cluster:
    """A thematic grouping of discussion content (one graph node)."""

    id: str
    name: str
    description: str
    ideas: Tuple[Idea, ...] = ()
    threads: Tuple[Thread, ...] = ()

    @property
    def comment_count(self) -> int:
        """Number of comments across all threads."""
        return sum(len(thread.comments) for thread in self.threads)

    def iter_comments(self) -> Iterator[Tuple[Thread, Comment]]:
        for thread in self.threads:
            for comment in thread.comments:
                yield thread, comment


@dataclass(frozen=True)
class Relation:
    """A directed, labeled link between two clusters.

    Several relations may share one (source, target) pair.
    """

    source: str
    target: str
    relation: str


@dataclass(frozen=True)
class Dataset:
    """Parsed dataset: clusters plus the relations between them."""

    clusters: Tuple[Cluster, ...] = ()
    relations: Tuple[Relation, ...] = ()
    name: str = ""
    keywords: Tuple[str, ...] = field(default=())

    def cluster(self, cluster_id: str) -> Optional[Cluster]:
        for cluster in self.clusters:
            if cluster.id == cluster_id:
                return cluster
        return None

    @property
    def cluster_ids(self) -> frozenset[str]:
        return frozenset(cluster.id for cluster in self.clusters)

    def dangling_relations(self) -> list[Relation]:
        """Relations whose source or target does not name a cluster."""
        known = self.cluster_ids
        return [
            r for r in self.relations
            if r.source not in known or r.target not in known
        ]
