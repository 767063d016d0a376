from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Severity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Lower rank means more severe."""
        return _SEVERITY_ORDER.index(self)


_SEVERITY_ORDER = [Severity.CRITICAL, Severity.HIGH, Severity.MEDIUM, Severity.LOW]


class IssueType(str, Enum):
    MISSING_TIMEOUT = "missing_timeout"


DEFAULT_CLIENT_VARIABLE_NAMES = (
    "client",
    "httpClient",
    "guzzle",
    "guzzleClient",
    "http",
    "api",
    "apiClient",
    "restClient",
)
DEFAULT_FOREIGN_CLIENT_VARIABLE_NAMES = ("symfonyClient", "httpClient")
DEFAULT_SYMFONY_CLASS_MARKER = "HttpClient"
DEFAULT_CURL_EXEC_FUNCTIONS = ("curl_exec",)


@dataclass(frozen=True)
class Issue:
    line: int
    type: IssueType
    library: str
    method: str
    severity: Severity
    message: str
    suggestion: str
    file: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "line": self.line,
            "type": self.type.value,
            "library": self.library,
            "method": self.method,
            "severity": self.severity.value,
            "message": self.message,
            "suggestion": self.suggestion,
        }


@dataclass(frozen=True)
class SkippedFile:
    file: str
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {"file": self.file, "reason": self.reason}


@dataclass(frozen=True)
class ScanSettings:
    extensions: tuple[str, ...] = (".php",)
    exclude_dirs: tuple[str, ...] = ()
    max_file_size_bytes: int = 2_000_000
    jobs: int = 1


@dataclass(frozen=True)
class DetectorSettings:
    client_variable_names: tuple[str, ...] = DEFAULT_CLIENT_VARIABLE_NAMES
    foreign_client_variable_names: tuple[str, ...] = DEFAULT_FOREIGN_CLIENT_VARIABLE_NAMES
    symfony_class_marker: str = DEFAULT_SYMFONY_CLASS_MARKER
    curl_exec_functions: tuple[str, ...] = DEFAULT_CURL_EXEC_FUNCTIONS


@dataclass(frozen=True)
class AppConfig:
    scan: ScanSettings = field(default_factory=ScanSettings)
    detectors: DetectorSettings = field(default_factory=DetectorSettings)


@dataclass(frozen=True)
class AnalysisReport:
    issues: tuple[Issue, ...]
    skipped: tuple[SkippedFile, ...]
    files_scanned: int
