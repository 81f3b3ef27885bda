"""Selection and hover state for the graph and its detail pane.

A cluster and an edge can never be selected at the same time: selecting
one clears the other. The detail pane is open exactly when something is
selected. Hover ids are independent of selection. The transcript query and
speaker filter narrow which messages the detail pane shows.

The state is an ordinary object handed to whoever renders the graph, via
``SelectionCallbacks``; there is no module-level singleton.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from .transcript import TranscriptMessage, filter_messages

IdCallback = Callable[[Optional[str]], None]


@dataclass
class SelectionState:
    selected_cluster_id: Optional[str] = None
    hovered_cluster_id: Optional[str] = None
    selected_edge_id: Optional[str] = None
    hovered_edge_id: Optional[str] = None
    detail_pane_open: bool = False
    search_query: str = ""
    filter_by_speaker: Optional[str] = None

    def select_cluster(self, cluster_id: Optional[str]) -> None:
        self.selected_cluster_id = cluster_id
        self.selected_edge_id = None
        self.detail_pane_open = cluster_id is not None

    def select_edge(self, edge_id: Optional[str]) -> None:
        self.selected_edge_id = edge_id
        self.selected_cluster_id = None
        self.detail_pane_open = edge_id is not None

    def toggle_edge(self, edge_id: str) -> None:
        """Select an edge, or deselect it when it is already selected."""
        self.select_edge(None if edge_id == self.selected_edge_id else edge_id)

    def toggle_cluster(self, cluster_id: str) -> None:
        self.select_cluster(None if cluster_id == self.selected_cluster_id else cluster_id)

    def hover_cluster(self, cluster_id: Optional[str]) -> None:
        self.hovered_cluster_id = cluster_id

    def hover_edge(self, edge_id: Optional[str]) -> None:
        self.hovered_edge_id = edge_id

    def set_detail_pane_open(self, is_open: bool) -> None:
        self.detail_pane_open = is_open

    def reset_filters(self) -> None:
        self.search_query = ""
        self.filter_by_speaker = None

    def visible_messages(
        self,
        messages: Iterable[TranscriptMessage],
        speaker_name: Optional[Callable[[str], str]] = None,
    ) -> List[TranscriptMessage]:
        """Transcript messages that pass the current query and speaker filter."""
        if speaker_name is None:
            return filter_messages(messages, self.search_query, self.filter_by_speaker)
        return filter_messages(messages, self.search_query, self.filter_by_speaker, speaker_name)

    def callbacks(self) -> "SelectionCallbacks":
        """Callbacks bound to this state, for handing to a renderer."""
        return SelectionCallbacks(
            on_node_select=self.select_cluster,
            on_edge_select=self.select_edge,
            on_node_hover=self.hover_cluster,
            on_edge_hover=self.hover_edge,
        )


@dataclass(frozen=True)
class SelectionCallbacks:
    """What a graph renderer calls when the user points at things."""

    on_node_select: IdCallback
    on_edge_select: IdCallback
    on_node_hover: IdCallback
    on_edge_hover: IdCallback
