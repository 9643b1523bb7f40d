"""
High-level analysis pipeline for AL Graph.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from algraph.config import AnalyzerSettings, Neo4jSettings, load_settings
from algraph.graph.loader import GraphLoader
from algraph.graph.schema import DEFAULT_SCHEMA, SchemaMetadata
from algraph.ir import Extension, ProjectAnalysis, merge_dependencies
from algraph.logging_config import get_logger
from algraph.pipeline.parser import ALParser
from algraph.pipeline.resolver import IntegrationResolver


@dataclass(frozen=True)
class SourceRead:
    path: Path
    source: Optional[str] = None
    error: Optional[str] = None


class ProjectAnalyzer:
    """
    Coordinates reading AL files, parsing them and resolving integrations.

    File reads fan out over a thread pool. Parsing runs on the calling
    thread once a file's text is available, and the resolver runs only after
    every read has either produced text or failed.
    """

    def __init__(
        self,
        *,
        settings: AnalyzerSettings | None = None,
        parser: ALParser | None = None,
        resolver: IntegrationResolver | None = None,
        logger=None,
    ) -> None:
        self._settings = settings or AnalyzerSettings()
        self._logger = logger or get_logger(__name__)
        self._parser = parser or ALParser(logger=self._logger)
        self._resolver = resolver or IntegrationResolver(
            include_references=self._settings.include_references,
            logger=self._logger,
        )

    def analyze(self, paths: Sequence[Path | str]) -> ProjectAnalysis:
        reads = self.read_sources(paths)

        extensions: List[Extension] = []
        failed: List[str] = []
        for read in reads:
            if read.source is None:
                failed.append(str(read.path))
                continue
            extensions.append(self._parser.parse_source(read.source, read.path))

        integrations = self._resolver.resolve(extensions)
        analysis = ProjectAnalysis(
            extensions=tuple(extensions),
            integrations=integrations,
            dependencies=merge_dependencies(extensions),
            failed_paths=tuple(failed),
        )
        self._logger.info("analysis complete", **analysis.counts())
        return analysis

    def read_sources(self, paths: Sequence[Path | str]) -> List[SourceRead]:
        """Read every path concurrently; results keep the input order."""

        resolved = [Path(path) for path in paths]
        if not resolved:
            return []
        workers = min(self._settings.max_workers, len(resolved))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(self._read_source, resolved))

    def _read_source(self, path: Path) -> SourceRead:
        try:
            return SourceRead(path=path, source=self._parser.read_file(path))
        except (OSError, UnicodeDecodeError) as exc:
            return SourceRead(path=path, error=str(exc))

    def sync(
        self,
        analysis: ProjectAnalysis,
        *,
        neo4j_settings: Neo4jSettings | None = None,
        schema: SchemaMetadata = DEFAULT_SCHEMA,
        loader: GraphLoader | None = None,
    ) -> None:
        """Persist a finished analysis into Neo4j."""

        owns_loader = loader is None
        if loader is None:
            loader = GraphLoader(settings=neo4j_settings or load_settings(), schema=schema)
        try:
            loader.sync_analysis(analysis)
        finally:
            if owns_loader:
                loader.close()
