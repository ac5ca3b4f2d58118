"""Pipeline orchestration for the generate/classify flows."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from .classification import CategoryMatchingEngine
from .config import ScanConfig, load_config
from .logging import get_logger
from .models import FileMetadata, SourceFile
from .output import OVERVIEW_DIRNAME, OutputWriter
from .rendering import API_ENDPOINTS_FILE, PROJECT_STRUCTURE_FILE, MarkdownLinter, MarkdownRenderer
from .scanner import ParserRegistry
from .workspace import WorkspaceScanner, resolve_root


@dataclass
class RunOutcome:
    """Result of a scan/classify/render run."""

    root: Path
    files: Tuple[FileMetadata, ...]
    classification: Dict[str, str]
    unparsed: List[str] = field(default_factory=list)
    reports: Dict[str, str] = field(default_factory=dict)
    output_dir: Optional[Path] = None
    dry_run: bool = False

    @property
    def generated(self) -> List[str]:
        return list(self.reports)


class Orchestrator:
    """Coordinates discovery, scanning, classification and report output."""

    def __init__(
        self,
        registry: ParserRegistry | None = None,
        writer: OutputWriter | None = None,
        linter: MarkdownLinter | None = None,
    ) -> None:
        self.registry = registry or ParserRegistry()
        self.writer = writer or OutputWriter()
        self.linter = linter or MarkdownLinter()
        self.logger = get_logger("orchestrator")

    def run(
        self,
        path: str | Path,
        config_path: str | Path | None = None,
        output_dir: str | Path | None = None,
        workers: int = 1,
        dry_run: bool = False,
    ) -> RunOutcome:
        """Scan, classify and write every report for the workspace at `path`."""
        outcome, config = self._classify(path, config_path, workers)
        renderer = MarkdownRenderer(config.markdown, linter=self.linter)

        reports: Dict[str, str] = {}
        reports[PROJECT_STRUCTURE_FILE] = renderer.render_project_structure(
            outcome.root, config.project_structure
        )
        if config.api_endpoints is not None:
            reports[API_ENDPOINTS_FILE] = renderer.render_api_endpoints(
                outcome.files, config.api_endpoints
            )
        for spec in config.generated_files:
            content = renderer.render_report(spec, outcome.files, config.categories)
            if content is None:
                self.logger.info("Skipping %s; no files matched its categories", spec.name)
                continue
            reports[spec.name] = content

        target = Path(output_dir).expanduser() if output_dir else outcome.root / OVERVIEW_DIRNAME
        outcome.reports = reports
        outcome.output_dir = target
        outcome.dry_run = dry_run
        if dry_run:
            self.logger.info("Dry-run completed; %d report(s) not written", len(reports))
            return outcome

        for name, content in reports.items():
            self.writer.write(target, name, content)
        self.logger.info("Generated %d report(s) in %s", len(reports), target)
        return outcome

    def classify(
        self,
        path: str | Path,
        config_path: str | Path | None = None,
        workers: int = 1,
    ) -> RunOutcome:
        """Scan and classify without rendering."""
        outcome, _ = self._classify(path, config_path, workers)
        return outcome

    def scan_sources(
        self, sources: Sequence[SourceFile], workers: int = 1
    ) -> Tuple[Tuple[FileMetadata, ...], List[str]]:
        """Scan every source; returns metadata in input order plus unparsed paths."""
        if workers > 1 and len(sources) > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                results = list(executor.map(self._scan_one, sources))
        else:
            results = [self._scan_one(source) for source in sources]

        files: List[FileMetadata] = []
        unparsed: List[str] = []
        for source, metadata in zip(sources, results):
            if metadata is None:
                unparsed.append(source.path)
                metadata = FileMetadata(path=source.path, extension=source.extension)
            elif not metadata.parsed:
                unparsed.append(source.path)
            files.append(metadata)
        return tuple(files), unparsed

    def _classify(
        self,
        path: str | Path,
        config_path: str | Path | None,
        workers: int,
    ) -> Tuple[RunOutcome, ScanConfig]:
        root = resolve_root(path)
        self.logger.info("Starting overview run for %s", root)
        config = self._load_config(root, config_path)

        sources = WorkspaceScanner(self.registry.extensions()).scan(root)
        self.logger.info("Found %d source file(s)", len(sources))
        files, unparsed = self.scan_sources(sources, workers=max(1, workers))
        self.logger.info(
            "Parsed %d file(s); %d produced no types", len(files) - len(unparsed), len(unparsed)
        )
        for rel_path in unparsed:
            self.logger.debug("No types found in %s", rel_path)

        # Runs only after every file is scanned so all conflicts are reported together.
        classification = CategoryMatchingEngine(config.categories).classify_all(files)
        classified = tuple(
            replace(item, category=classification.get(item.path, "")) for item in files
        )
        outcome = RunOutcome(
            root=root,
            files=classified,
            classification=classification,
            unparsed=unparsed,
        )
        return outcome, config

    def _scan_one(self, source: SourceFile) -> Optional[FileMetadata]:
        try:
            return self.registry.parse(source)
        except Exception as exc:
            self.logger.warning("Failed to scan %s: %s", source.path, exc)
            return None

    def _load_config(self, root: Path, config_path: str | Path | None) -> ScanConfig:
        location = Path(config_path) if config_path else root
        config = load_config(location)
        self.logger.info("Loaded configuration from %s", config.source)
        return config


__all__ = ["Orchestrator", "RunOutcome"]
