from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path

from timeout_guard.models import AnalysisReport, Issue, Severity, SkippedFile

REPORT_FORMATS = ("text", "json")

SEVERITY_MARKERS = {
    Severity.CRITICAL: "🔴",
    Severity.HIGH: "⚠️",
    Severity.MEDIUM: "🟡",
    Severity.LOW: "ℹ️",
}

RULE = "━" * 35


def render_report(report: AnalysisReport, fmt: str = "text", *, cwd: Path | None = None) -> str:
    if fmt == "json":
        return render_json(report)
    if fmt == "text":
        return render_text(report.issues, report.skipped, cwd=cwd)
    raise ValueError(f"Unsupported report format: {fmt}")


def render_json(report: AnalysisReport) -> str:
    payload = {
        "summary": {
            "total": len(report.issues),
            "by_severity": count_by_severity(report.issues),
            "files_scanned": report.files_scanned,
            "skipped": len(report.skipped),
        },
        "issues": [issue.to_dict() for issue in report.issues],
        "skipped": [item.to_dict() for item in report.skipped],
    }
    return json.dumps(payload, indent=2, ensure_ascii=True)


def render_text(
    issues: Sequence[Issue],
    skipped: Sequence[SkippedFile] = (),
    *,
    cwd: Path | None = None,
) -> str:
    lines: list[str] = []

    if not issues:
        lines.append("✅ No issues found! All HTTP calls have timeout configuration.")
        lines.extend(_skipped_section(skipped, cwd))
        return "\n".join(lines) + "\n"

    lines.append(f"❌ Found {len(issues)} issue(s):")
    lines.append("")

    shown_suggestions: set[tuple[str, str]] = set()
    for file_name, file_issues in group_by_file(issues).items():
        lines.append(f"📄 {_display_path(file_name, cwd)}")
        for issue in file_issues:
            lines.append(
                f"  {_marker(issue.severity)} Line {issue.line}: {issue.message} "
                f"({issue.library} {issue.method})"
            )
            key = (issue.library, issue.type.value)
            if issue.suggestion and key not in shown_suggestions:
                shown_suggestions.add(key)
                lines.append("")
                lines.append(_indent(issue.suggestion, 4))
            lines.append("")
        lines.append("")

    lines.append(RULE)
    lines.append("Summary:")
    for severity, count in count_by_severity(issues).items():
        label = severity.capitalize()
        lines.append(f"  {_marker(Severity(severity))} {label}: {count}")
    lines.append("")
    lines.append("💡 Tip: Add timeouts to prevent hanging requests that can block your application.")
    lines.extend(_skipped_section(skipped, cwd))
    return "\n".join(lines) + "\n"


def group_by_file(issues: Sequence[Issue]) -> dict[str, list[Issue]]:
    grouped: dict[str, list[Issue]] = {}
    for issue in issues:
        grouped.setdefault(issue.file or "<unknown>", []).append(issue)
    return grouped


def count_by_severity(issues: Sequence[Issue]) -> dict[str, int]:
    counts: dict[Severity, int] = {}
    for issue in issues:
        counts[issue.severity] = counts.get(issue.severity, 0) + 1
    return {severity.value: counts[severity] for severity in sorted(counts, key=lambda item: item.rank)}


def write_report(path: str | Path, content: str) -> None:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with out.open("w", encoding="utf-8") as handle:
        handle.write(content)


def _skipped_section(skipped: Sequence[SkippedFile], cwd: Path | None) -> list[str]:
    if not skipped:
        return []
    lines = ["", f"⏭️  Skipped {len(skipped)} file(s) that could not be analyzed:"]
    for item in skipped:
        lines.append(f"  - {_display_path(item.file, cwd)}: {item.reason}")
    return lines


def _marker(severity: Severity) -> str:
    return SEVERITY_MARKERS.get(severity, "•")


def _display_path(file_name: str, cwd: Path | None) -> str:
    base = (cwd or Path.cwd()).resolve()
    try:
        relative = Path(file_name).resolve().relative_to(base)
    except ValueError:
        return file_name
    return f"./{relative.as_posix()}"


def _indent(text: str, spaces: int) -> str:
    pad = " " * spaces
    return "\n".join(pad + line for line in text.splitlines())
