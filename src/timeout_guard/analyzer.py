from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from pathlib import Path

from timeout_guard.detectors import Detector, build_detectors
from timeout_guard.models import AnalysisReport, AppConfig, Issue, SkippedFile
from timeout_guard.parsing import parse_source

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileResult:
    path: str
    issues: tuple[Issue, ...] = ()
    skipped: SkippedFile | None = None


class Analyzer:
    """Runs every registered detector over every PHP file below a root.

    Issues come back in file order, then detector registration order, then
    source order within a file. A file that cannot be read or parsed is
    recorded as skipped and never stops the run.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        detector_factory: Callable[[], list[Detector]] | None = None,
    ):
        self.config = config or AppConfig()
        self.detector_factory = detector_factory or (lambda: build_detectors(self.config.detectors))
        self.detectors = self.detector_factory()

    def analyze(self, root: str | Path) -> list[Issue]:
        return list(self.run(root).issues)

    def run(self, root: str | Path) -> AnalysisReport:
        root_path = Path(root)
        if not root_path.exists():
            raise ValueError(f"Path does not exist: {root_path}")

        files = list(
            iter_source_files(
                root_path,
                extensions=self.config.scan.extensions,
                exclude_dirs=self.config.scan.exclude_dirs,
            )
        )

        jobs = self.config.scan.jobs
        if jobs > 1 and len(files) > 1:
            results = self._run_parallel(files, jobs)
        else:
            results = [self.analyze_file(path) for path in files]

        issues: list[Issue] = []
        skipped: list[SkippedFile] = []
        for result in results:
            issues.extend(result.issues)
            if result.skipped is not None:
                skipped.append(result.skipped)

        return AnalysisReport(
            issues=tuple(issues),
            skipped=tuple(skipped),
            files_scanned=len(files),
        )

    def analyze_file(self, path: Path, detectors: list[Detector] | None = None) -> FileResult:
        file_name = str(path)
        detectors = self.detectors if detectors is None else detectors

        try:
            size = path.stat().st_size
            if size > self.config.scan.max_file_size_bytes:
                return self._skip(file_name, f"file is larger than {self.config.scan.max_file_size_bytes} bytes")
            source = path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            return self._skip(file_name, "file is not valid UTF-8")
        except OSError as exc:
            return self._skip(file_name, f"cannot read file: {exc.strerror or exc}")

        parsed = parse_source(source)
        if not parsed.ok:
            return self._skip(file_name, parsed.error or "parse failed")

        logger.debug("Analyzing %s", file_name)
        issues: list[Issue] = []
        for detector in detectors:
            issues.extend(replace(issue, file=file_name) for issue in detector.scan(parsed.tree))
        return FileResult(path=file_name, issues=tuple(issues))

    def _run_parallel(self, files: list[Path], jobs: int) -> list[FileResult]:
        workers = min(jobs, len(files))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            # map() yields in submission order, which keeps the report deterministic.
            return list(executor.map(self._analyze_isolated, files))

    def _analyze_isolated(self, path: Path) -> FileResult:
        return self.analyze_file(path, self.detector_factory())

    @staticmethod
    def _skip(file_name: str, reason: str) -> FileResult:
        logger.warning("Skipping %s: %s", file_name, reason)
        return FileResult(path=file_name, skipped=SkippedFile(file=file_name, reason=reason))


def iter_source_files(
    root: Path,
    *,
    extensions: tuple[str, ...] = (".php",),
    exclude_dirs: tuple[str, ...] = (),
) -> Iterator[Path]:
    if root.is_file():
        yield root
        return

    wanted = {ext.lower() for ext in extensions}
    excluded = set(exclude_dirs)

    for path in sorted(root.rglob("*")):
        if not path.is_file() or path.suffix.lower() not in wanted:
            continue
        parts = path.relative_to(root).parts
        if any(part.startswith(".") for part in parts):
            continue
        if any(part in excluded for part in parts[:-1]):
            continue
        yield path
