from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Tuple

import pytest


def pytest_sessionstart(session):  # type: ignore[override]
    root = Path(__file__).resolve().parents[1]
    src = root / "src"
    if str(src) not in sys.path:
        sys.path.insert(0, str(src))
    # Ensure console scripts load in editable style as well
    os.environ.setdefault("PYTHONPATH", str(src))
    # Keep test runs out of ~/.insight-explorer/logs
    os.environ.setdefault("INSIGHT_EXPLORER_LOG_DISABLE_FILE", "1")


WITNESS = "cx:cluster-witness-management"
DATA = "cx:cluster-data-standards"
STAFF = "cx:cluster-staff-capacity"
FEEDBACK = "cx:cluster-public-feedback"
MEMORY = "cx:cluster-committee-memory"


def _cluster(cluster_id: str, name: str, description: str = "", **extra: Any) -> Dict[str, Any]:
    node = {"@id": cluster_id, "name": name, "description": description}
    node.update(extra)
    return node


@pytest.fixture
def sample_document() -> Dict[str, Any]:
    """A small JSON-LD export: five clusters, a hub, a parallel pair, one dangling edge."""
    return {
        "@context": {"cx": "https://example.org/cx#"},
        "name": "Committee Modernization Session",
        "keywords": ["hearings", "witnesses"],
        "hasPart": [
            _cluster(
                WITNESS,
                "Witness Management",
                "Scheduling and preparing witnesses ahead of hearings",
                itemListElement=[
                    {"@id": "idea-1", "text": "Standard intake form for every witness"},
                ],
                **{"cx:threads": [
                    {
                        "@id": "thread-1",
                        "name": "Intake timing",
                        "summary": "When testimony should arrive",
                        "ref:idea": {"@id": "idea-1"},
                        "cx:comments": [
                            {
                                "@id": "comment-1",
                                "author": "Kirsten Smith",
                                "startTime": "3:05",
                                "text": "Staff need written testimony two days early.",
                            },
                            {
                                "@id": "comment-2",
                                "author": "Nate",
                                "startTime": "1:02:09",
                                "text": "Agreed, and the clerk can send reminders.",
                            },
                        ],
                    },
                ]},
            ),
            _cluster(
                DATA,
                "Data Standards",
                "Shared schemas for committee records",
                **{"cx:threads": [
                    {
                        "@id": "thread-2",
                        "name": "Record formats",
                        "summary": "Moving hearing records to structured data",
                        "ref:idea": "idea-9",
                        "cx:comments": [
                            {
                                "@id": "comment-3",
                                "author": "Alex",
                                "startTime": "12:40",
                                "text": (
                                    "Most of our hearing records are still scanned PDFs and "
                                    "nobody can search them, including the old witness lists."
                                ),
                            },
                        ],
                    },
                ]},
            ),
            _cluster(STAFF, "Staff Capacity", "Hiring and retaining committee staff"),
            _cluster(FEEDBACK, "Public Feedback", "Collecting input from constituents"),
            _cluster(MEMORY, "Committee Memory", "Preserving institutional knowledge"),
        ],
        "cx:edges": [
            {"from": WITNESS, "to": DATA, "relation": "operational dependency"},
            {"from": WITNESS, "to": STAFF, "relation": "resource constraint"},
            {"from": WITNESS, "to": FEEDBACK, "relation": "learning loop"},
            {"from": WITNESS, "to": MEMORY, "relation": "historical context indexing"},
            {"from": DATA, "to": MEMORY, "relation": "improved data structure"},
            {"from": DATA, "to": MEMORY, "relation": "tagging and retrieval"},
            {"from": FEEDBACK, "to": "cx:cluster-missing", "relation": "reporting on outcomes"},
        ],
    }


@pytest.fixture
def sample_dataset(sample_document):
    from insight_explorer.loader import dataset_from_dict

    return dataset_from_dict(sample_document)


@pytest.fixture
def dataset_file(tmp_path: Path, sample_document) -> Path:
    path = tmp_path / "insights.json"
    path.write_text(json.dumps(sample_document), encoding="utf-8")
    return path


@pytest.fixture
def make_dataset() -> Callable[..., Any]:
    """Build a Dataset from cluster ids and (source, target, relation) triples."""
    from insight_explorer.models import Cluster, Dataset, Relation

    def _make(
        cluster_ids: Iterable[str],
        relations: Iterable[Tuple[str, str, str]] = (),
    ):
        return Dataset(
            clusters=tuple(Cluster(id=cid, name=cid, description="") for cid in cluster_ids),
            relations=tuple(Relation(source=s, target=t, relation=r) for s, t, r in relations),
        )

    return _make


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch) -> Path:
    """Point config discovery at an empty home and project directory."""
    from insight_explorer.config_loader import clear_config_cache

    home = tmp_path / "home"
    project = tmp_path / "project"
    home.mkdir()
    project.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(project)
    for name in list(os.environ):
        if name.startswith("INSIGHT_EXPLORER_") and not name.startswith("INSIGHT_EXPLORER_LOG_"):
            monkeypatch.delenv(name, raising=False)
    clear_config_cache()
    yield project
    clear_config_cache()
