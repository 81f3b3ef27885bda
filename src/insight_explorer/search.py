"""Full-text search over clusters, ideas, threads and comments.

The dataset is flattened into one document per entity, each with a title,
a body text and (for comments) an author. Queries are tokenized the same
way as documents; every query term may match index terms exactly, by
prefix, or within an edit distance proportional to its length. Scores use
BM25+ per field, weighted by field boost and by how loosely the term
matched.

Key capabilities:
- Case-insensitive tokenizing on whitespace and ``- _ / . , : ;``
- Prefix and fuzzy (Levenshtein) term expansion
- Field boosts: title over text over author
- AND (default) or OR combination of query terms
"""

from __future__ import annotations

import bisect
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Tuple

import jellyfish

from .config_schema import SearchConfig
from .models import Dataset
from .observability import log_warning, timeit
from .selection import SelectionCallbacks

logger = logging.getLogger(__name__)

DocumentKind = Literal["cluster", "idea", "thread", "comment"]

SEARCH_FIELDS: Tuple[str, ...] = ("title", "text", "author")

TOKEN_SPLIT = re.compile(r"[\s\-_/.,:;]+")

# BM25+ parameters
BM25_K = 1.2
BM25_B = 0.7
BM25_D = 0.5

# Down-weighting for non-exact term matches
PREFIX_WEIGHT = 0.375
FUZZY_WEIGHT = 0.45


# ============================================================================
# Documents
# ============================================================================


@dataclass(frozen=True)
class SearchDocument:
    """One searchable entity.

    Attributes:
        id: Composite id (``cluster:<c>``, ``idea:<c>:<i>``, ``thread:<c>:<t>``,
            ``comment:<c>:<t>:<m>``)
        kind: Entity kind
        cluster_id: Owning cluster
        title: Cluster name, thread name, or the first characters of idea/comment text
        text: Description, idea text, thread summary or comment text
        author: Comment author
        timestamp: Comment start time
        thread_id: Owning thread for comments
    """

    id: str
    kind: DocumentKind
    cluster_id: str
    title: str
    text: str
    author: Optional[str] = None
    timestamp: Optional[str] = None
    thread_id: Optional[str] = None

    def field_value(self, name: str) -> str:
        return getattr(self, name) or ""


@dataclass
class SearchResult:
    """A single ranked hit.

    Attributes:
        kind: Entity kind
        id: Document id
        cluster_id: Owning cluster, for selecting the graph node
        text: Title when present, otherwise body text
        score: Relevance (higher is better)
        matches: Index terms that matched the query
    """

    kind: DocumentKind
    id: str
    cluster_id: str
    text: str
    score: float
    matches: List[str] = field(default_factory=list)
    author: Optional[str] = None
    timestamp: Optional[str] = None


def tokenize(text: str) -> List[str]:
    """Lowercase terms split on whitespace and the fixed punctuation set."""
    return [term for term in TOKEN_SPLIT.split(text.lower()) if term]


def _dedupe_id(candidate: str, seen: Dict[str, int]) -> str:
    if candidate not in seen:
        seen[candidate] = 1
        return candidate
    n = seen[candidate]
    while True:
        n += 1
        unique = f"{candidate}#{n}"
        if unique not in seen:
            break
    seen[candidate] = n
    log_warning("Search document id collision", doc_id=candidate, renamed_to=unique)
    seen[unique] = 1
    return unique


def build_documents(dataset: Dataset, title_prefix_length: int = 60) -> List[SearchDocument]:
    """Flatten a dataset into search documents, in dataset order."""
    docs: List[SearchDocument] = []
    seen: Dict[str, int] = {}

    for cluster in dataset.clusters:
        cid = cluster.id
        docs.append(SearchDocument(
            id=_dedupe_id(f"cluster:{cid}", seen),
            kind="cluster",
            cluster_id=cid,
            title=cluster.name,
            text=cluster.description,
        ))

        for idea in cluster.ideas:
            docs.append(SearchDocument(
                id=_dedupe_id(f"idea:{cid}:{idea.id}", seen),
                kind="idea",
                cluster_id=cid,
                title=idea.text[:title_prefix_length],
                text=idea.text,
            ))

        for thread in cluster.threads:
            docs.append(SearchDocument(
                id=_dedupe_id(f"thread:{cid}:{thread.id}", seen),
                kind="thread",
                cluster_id=cid,
                title=thread.name,
                text=thread.summary,
            ))

            for comment in thread.comments:
                docs.append(SearchDocument(
                    id=_dedupe_id(f"comment:{cid}:{thread.id}:{comment.id}", seen),
                    kind="comment",
                    cluster_id=cid,
                    title=comment.text[:title_prefix_length],
                    text=comment.text,
                    author=comment.author,
                    timestamp=comment.start_time,
                    thread_id=thread.id,
                ))

    return docs


# ============================================================================
# Index
# ============================================================================


class SearchIndex:
    """Immutable inverted index over a fixed document set.

    Rebuilding means constructing a new index; queries against an existing
    instance always see one consistent snapshot.
    """

    def __init__(self, documents: List[SearchDocument], config: Optional[SearchConfig] = None):
        self.config = config or SearchConfig()
        self.documents: Tuple[SearchDocument, ...] = tuple(documents)
        # term -> field -> doc index -> term frequency
        self._postings: Dict[str, Dict[str, Dict[int, int]]] = {}
        self._field_lengths: Dict[str, List[int]] = {name: [] for name in SEARCH_FIELDS}

        for doc_index, doc in enumerate(self.documents):
            for name in SEARCH_FIELDS:
                terms = tokenize(doc.field_value(name))
                self._field_lengths[name].append(len(terms))
                for term in terms:
                    by_field = self._postings.setdefault(term, {})
                    by_doc = by_field.setdefault(name, {})
                    by_doc[doc_index] = by_doc.get(doc_index, 0) + 1

        self._avg_field_length = {
            name: (sum(lengths) / len(lengths)) if lengths else 0.0
            for name, lengths in self._field_lengths.items()
        }
        self._vocabulary: List[str] = sorted(self._postings)

    def __len__(self) -> int:
        return len(self.documents)

    @property
    def term_count(self) -> int:
        return len(self._vocabulary)

    # ------------------------------------------------------------------
    # Term expansion
    # ------------------------------------------------------------------

    def _max_distance(self, term: str) -> int:
        fuzzy = self.config.fuzzy
        if fuzzy <= 0:
            return 0
        return min(self.config.max_fuzzy, math.floor(len(term) * fuzzy + 0.5))

    def expand_term(self, term: str) -> Dict[str, float]:
        """Index terms matching a query term, with their match weight.

        Exact matches weigh 1. Prefix matches and fuzzy matches are
        down-weighted by how much longer or more distant they are.
        """
        matches: Dict[str, float] = {}
        length = len(term)

        if term in self._postings:
            matches[term] = 1.0

        if self.config.prefix:
            start = bisect.bisect_left(self._vocabulary, term)
            for candidate in self._vocabulary[start:]:
                if not candidate.startswith(term):
                    break
                if candidate in matches:
                    continue
                distance = len(candidate) - length
                matches[candidate] = PREFIX_WEIGHT * length / (length + 0.3 * distance)

        max_distance = self._max_distance(term)
        if max_distance > 0:
            for candidate in self._vocabulary:
                if candidate in matches or abs(len(candidate) - length) > max_distance:
                    continue
                distance = jellyfish.levenshtein_distance(term, candidate)
                if distance <= max_distance:
                    matches[candidate] = FUZZY_WEIGHT * length / (length + distance)

        return matches

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def _boost(self, field_name: str) -> float:
        cfg = self.config
        return {"title": cfg.title_boost, "text": cfg.text_boost, "author": cfg.author_boost}[field_name]

    def _bm25(self, tf: int, df: int, field_length: int, avg_length: float) -> float:
        n = len(self.documents)
        idf = math.log(1 + (n - df + 0.5) / (df + 0.5))
        norm = 1 - BM25_B + BM25_B * (field_length / avg_length if avg_length else 0.0)
        return idf * (BM25_D + tf * (BM25_K + 1) / (tf + BM25_K * norm))

    def score_term(self, term: str) -> Dict[int, Tuple[float, List[str]]]:
        """Score every document matching one query term."""
        scores: Dict[int, Tuple[float, List[str]]] = {}
        for index_term, weight in self.expand_term(term).items():
            for field_name, by_doc in self._postings[index_term].items():
                boost = self._boost(field_name)
                df = len(by_doc)
                lengths = self._field_lengths[field_name]
                avg = self._avg_field_length[field_name]
                for doc_index, tf in by_doc.items():
                    value = weight * boost * self._bm25(tf, df, lengths[doc_index], avg)
                    total, matched = scores.get(doc_index, (0.0, []))
                    if index_term not in matched:
                        matched = matched + [index_term]
                    scores[doc_index] = (total + value, matched)
        return scores

    def search(self, text: str, limit: Optional[int] = None) -> List[SearchResult]:
        """Run a query; blank queries return nothing."""
        terms = tokenize(text or "")
        if not terms:
            return []

        combined: Optional[Dict[int, Tuple[float, List[str]]]] = None
        for term in terms:
            term_scores = self.score_term(term)
            if combined is None:
                combined = term_scores
            elif self.config.combine_with == "AND":
                combined = {
                    doc: (combined[doc][0] + score, combined[doc][1] + [m for m in matched if m not in combined[doc][1]])
                    for doc, (score, matched) in term_scores.items()
                    if doc in combined
                }
            else:
                merged = dict(combined)
                for doc, (score, matched) in term_scores.items():
                    prev_score, prev_matched = merged.get(doc, (0.0, []))
                    merged[doc] = (prev_score + score, prev_matched + [m for m in matched if m not in prev_matched])
                combined = merged
            if not combined and self.config.combine_with == "AND":
                return []

        ranked = sorted((combined or {}).items(), key=lambda item: (-item[1][0], item[0]))
        if limit is not None:
            ranked = ranked[:limit]

        results = []
        for doc_index, (score, matched) in ranked:
            doc = self.documents[doc_index]
            results.append(SearchResult(
                kind=doc.kind,
                id=doc.id,
                cluster_id=doc.cluster_id,
                text=doc.title or doc.text,
                score=score,
                matches=matched,
                author=doc.author,
                timestamp=doc.timestamp,
            ))
        return results


# ============================================================================
# Public API
# ============================================================================


def build_search_index(dataset: Dataset, config: Optional[SearchConfig] = None) -> SearchIndex:
    """Build a fresh index for a dataset."""
    config = config or SearchConfig()
    with timeit("build_search_index") as info:
        index = SearchIndex(build_documents(dataset, config.title_prefix_length), config)
        info.update(documents=len(index), terms=index.term_count)
    return index


def query(index: Optional[SearchIndex], text: str, limit: Optional[int] = None) -> List[SearchResult]:
    """Query an index; a missing index or blank text yields no results."""
    if index is None:
        logger.debug("Query before any index was built")
        return []
    if not text or not text.strip():
        return []
    with timeit("search_query", terms=len(tokenize(text))) as info:
        results = index.search(text, limit=limit)
        info["results"] = len(results)
    return results


class SearchService:
    """Holds the current index and swaps it whole on rebuild.

    When given selection callbacks, choosing a result selects the cluster
    that owns it.
    """

    def __init__(
        self,
        config: Optional[SearchConfig] = None,
        callbacks: Optional[SelectionCallbacks] = None,
    ):
        self.config = config or SearchConfig()
        self.callbacks = callbacks
        self._index: Optional[SearchIndex] = None

    @property
    def index(self) -> Optional[SearchIndex]:
        return self._index

    def rebuild(self, dataset: Dataset) -> SearchIndex:
        index = build_search_index(dataset, self.config)
        self._index = index
        return index

    def search(self, text: str, limit: Optional[int] = None) -> List[SearchResult]:
        return query(self._index, text, limit=limit)

    def select_result(self, result: SearchResult) -> None:
        """Report a chosen result as a selection of its owning cluster."""
        if self.callbacks is not None:
            self.callbacks.on_node_select(result.cluster_id)
