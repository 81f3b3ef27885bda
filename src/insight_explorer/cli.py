#!/usr/bin/env python3
"""Insight Explorer CLI - render, search and summarize a discussion dataset."""
from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict


def _load(path: str):
    from .errors import DatasetError
    from .loader import load_dataset

    try:
        return load_dataset(path)
    except DatasetError as e:
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(1)


def _config():
    from .config_loader import get_config
    from .errors import ConfigError
    from .observability import configure_logging

    try:
        config = get_config()
    except ConfigError as e:
        print(f"❌ Invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)
    configure_logging(config.logging)
    return config


def main(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(
        prog="insight-explorer",
        description="Explore clusters, relations and transcripts of a committee discussion",
    )

    sub = ap.add_subparsers(dest="cmd")

    p_render = sub.add_parser("render", help="Lay out the cluster graph and write an HTML page")
    p_render.add_argument("dataset", help="Path to the JSON-LD dataset")
    p_render.add_argument("--out", "-o", default="graph.html", help="Output HTML file (default: graph.html)")
    p_render.add_argument("--width", type=float, default=1600, help="Layout viewport width (default: 1600)")
    p_render.add_argument("--height", type=float, default=1000, help="Layout viewport height (default: 1000)")
    p_render.add_argument("--frames", type=int, default=600, help="Layout frame budget (default: 600)")
    p_render.add_argument("--select-edge", help="Edge id to render as selected")

    p_search = sub.add_parser("search", help="Full-text search over clusters, ideas, threads and comments")
    p_search.add_argument("dataset", help="Path to the JSON-LD dataset")
    p_search.add_argument("query", help="Search text")
    p_search.add_argument("--limit", type=int, default=20, help="Maximum results (default: 20)")
    p_search.add_argument("--json", action="store_true", help="Print results as JSON")

    p_stats = sub.add_parser("stats", help="Show dataset and graph statistics")
    p_stats.add_argument("dataset", help="Path to the JSON-LD dataset")

    args = ap.parse_args(argv)

    if not args.cmd:
        ap.print_help()
        sys.exit(0)

    if args.cmd == "render":
        from .graph_model import build_graph_model
        from .layout import Viewport
        from .render import write_html
        from .selection import SelectionState

        config = _config()
        dataset = _load(args.dataset)
        graph, _ = build_graph_model(dataset, config=config.disambiguation)

        selection = SelectionState()
        if args.select_edge:
            if graph.edge(args.select_edge) is None:
                print(f"❌ Unknown edge id: {args.select_edge}", file=sys.stderr)
                sys.exit(1)
            selection.select_edge(args.select_edge)

        try:
            out = write_html(
                graph,
                args.out,
                config=config,
                viewport=Viewport(args.width, args.height),
                max_frames=args.frames,
                selection=selection,
            )
        except ValueError as e:
            print(f"❌ {e}", file=sys.stderr)
            sys.exit(1)
        print(str(out))
        sys.exit(0)

    if args.cmd == "search":
        from .search import build_search_index, query

        config = _config()
        dataset = _load(args.dataset)
        index = build_search_index(dataset, config.search)
        results = query(index, args.query, limit=args.limit)

        if args.json:
            print(json.dumps([asdict(r) for r in results], indent=2))
            sys.exit(0)

        if not results:
            print("No matches.")
            sys.exit(0)
        for result in results:
            print(f"{result.score:7.3f}  {result.kind:<8} {result.id}")
            print(f"         {result.text}")
        sys.exit(0)

    if args.cmd == "stats":
        from .graph_model import build_graph_model

        config = _config()
        dataset = _load(args.dataset)
        graph, _ = build_graph_model(dataset, config=config.disambiguation)

        comments = sum(c.comment_count for c in dataset.clusters)
        threads = sum(len(c.threads) for c in dataset.clusters)
        ideas = sum(len(c.ideas) for c in dataset.clusters)

        print("Dataset Statistics:")
        if dataset.name:
            print(f"  Name:                 {dataset.name}")
        print(f"  Clusters:             {len(dataset.clusters)}")
        print(f"  Ideas:                {ideas}")
        print(f"  Threads:              {threads}")
        print(f"  Comments:             {comments}")
        print(f"  Relations:            {len(dataset.relations)}")
        print(f"  Dangling relations:   {len(dataset.dangling_relations())}")
        print()
        print("Graph Statistics:")
        print(f"  Nodes:                {len(graph.nodes)}")
        print(f"  Edges:                {len(graph.edges)}")
        print(f"  Hub edges:            {sum(1 for e in graph.edges if e.is_hub)}")
        print(f"  Parallel edges:       {sum(1 for e in graph.edges if e.group_total > 1)}")
        sys.exit(0)

    print(f"insight-explorer {args.cmd}: unknown command", file=sys.stderr)
    sys.exit(2)


if __name__ == "__main__":
    main()
