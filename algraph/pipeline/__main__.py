"""
Command line entry point for the AL Graph analysis pipeline.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Iterable, Sequence

from algraph.api.models import ProjectAnalysisModel
from algraph.config import load_analyzer_settings
from algraph.logging_config import configure_logging, get_logger
from algraph.pipeline import ProjectAnalyzer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Extract objects, events and flowfields from Business Central AL files "
        "and infer integrations between them."
    )
    parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="One or more .al files or directories containing them.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full analysis as JSON instead of a summary.",
    )
    parser.add_argument(
        "--include-source",
        action="store_true",
        help="Include each file's source text in the JSON output.",
    )
    parser.add_argument(
        "--references",
        action="store_true",
        help="Also infer integrations from record references to objects in other files.",
    )
    parser.add_argument(
        "--sync-graph",
        action="store_true",
        help="Persist the analysis into Neo4j (requires ALGRAPH_NEO4J_* variables).",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser


def resolve_inputs(
    inputs: Iterable[Path],
    *,
    pattern: str = "**/*.al",
    ignore_dirs: Sequence[str] = (),
) -> list[Path]:
    resolved: list[Path] = []
    ignored = set(ignore_dirs)

    for input_path in inputs:
        if input_path.is_dir():
            resolved.extend(
                path
                for path in sorted(input_path.glob(pattern))
                if path.is_file() and not ignored.intersection(path.relative_to(input_path).parts[:-1])
            )
            continue

        if not input_path.exists():
            raise FileNotFoundError(f"{input_path} does not exist")

        resolved.append(input_path)

    if not resolved:
        raise RuntimeError("No AL files found for analysis")

    # Deduplicate while preserving order
    ordered_unique: dict[Path, None] = {}
    for path in resolved:
        ordered_unique.setdefault(path, None)

    return list(ordered_unique.keys())


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = load_analyzer_settings()
    if args.references:
        settings = replace(settings, include_references=True)
    configure_logging(debug=args.debug or settings.debug)
    logger = get_logger("algraph.pipeline")

    al_paths = resolve_inputs(args.paths, pattern=settings.code_glob, ignore_dirs=settings.ignore_dirs)
    logger.info("analyzing AL files", files=len(al_paths))

    analyzer = ProjectAnalyzer(settings=settings, logger=logger)
    analysis = analyzer.analyze(al_paths)

    if args.sync_graph:
        analyzer.sync(analysis)

    if args.json:
        model = ProjectAnalysisModel.from_ir(analysis, include_source=args.include_source)
        print(model.model_dump_json(indent=2))
        return 0

    counts = analysis.counts()
    print(
        f"Analysis complete: {counts['extensions']} extensions, "
        f"{counts['objects']} objects, "
        f"{counts['events']} events, "
        f"{counts['flowfields']} flowfields, "
        f"{counts['integrations']} integrations, "
        f"{counts['failed']} failed files."
    )
    for integration in analysis.integrations:
        print(f"  {integration.source} -> {integration.target} ({integration.kind.value}): {integration.description}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
