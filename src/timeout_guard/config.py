from __future__ import annotations

import json
from pathlib import Path

from timeout_guard.models import AppConfig, DetectorSettings, ScanSettings


class ConfigError(ValueError):
    pass


def load_config(path: str | Path | None) -> AppConfig:
    if path is None:
        return AppConfig()

    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with config_path.open("r", encoding="utf-8") as handle:
            raw = json.load(handle)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Config file is not valid JSON: {config_path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError("Config must be a JSON object")

    return AppConfig(
        scan=_load_scan(raw.get("scan", {})),
        detectors=_load_detectors(raw.get("detectors", {})),
    )


def _load_scan(scan_raw: object) -> ScanSettings:
    if not isinstance(scan_raw, dict):
        raise ConfigError("'scan' must be an object")

    defaults = ScanSettings()
    extensions = _ensure_string_list(scan_raw.get("extensions"), "scan.extensions")
    exclude_dirs = _ensure_string_list(scan_raw.get("exclude_dirs"), "scan.exclude_dirs")
    if extensions is not None and not extensions:
        raise ConfigError("'scan.extensions' must name at least one extension")

    return ScanSettings(
        extensions=(
            tuple(_normalize_extension(ext) for ext in extensions)
            if extensions is not None
            else defaults.extensions
        ),
        exclude_dirs=tuple(exclude_dirs) if exclude_dirs is not None else defaults.exclude_dirs,
        max_file_size_bytes=_positive_int(
            scan_raw.get("max_file_size_bytes", defaults.max_file_size_bytes),
            "scan.max_file_size_bytes",
        ),
        jobs=_positive_int(scan_raw.get("jobs", defaults.jobs), "scan.jobs"),
    )


def _load_detectors(detectors_raw: object) -> DetectorSettings:
    if not isinstance(detectors_raw, dict):
        raise ConfigError("'detectors' must be an object")

    defaults = DetectorSettings()
    client_names = _ensure_string_list(
        detectors_raw.get("client_variable_names"), "detectors.client_variable_names"
    )
    foreign_names = _ensure_string_list(
        detectors_raw.get("foreign_client_variable_names"),
        "detectors.foreign_client_variable_names",
    )
    curl_functions = _ensure_string_list(
        detectors_raw.get("curl_exec_functions"), "detectors.curl_exec_functions"
    )

    marker = detectors_raw.get("symfony_class_marker", defaults.symfony_class_marker)
    if not isinstance(marker, str) or not marker.strip():
        raise ConfigError("'detectors.symfony_class_marker' must be a non-empty string")

    # An explicit empty list disables that check; only a missing key means "use defaults".
    return DetectorSettings(
        client_variable_names=(
            tuple(client_names) if client_names is not None else defaults.client_variable_names
        ),
        foreign_client_variable_names=(
            tuple(foreign_names) if foreign_names is not None else defaults.foreign_client_variable_names
        ),
        symfony_class_marker=marker.strip(),
        curl_exec_functions=(
            tuple(curl_functions) if curl_functions is not None else defaults.curl_exec_functions
        ),
    )


def _normalize_extension(value: str) -> str:
    ext = value.strip().lower()
    return ext if ext.startswith(".") else f".{ext}"


def _positive_int(value: object, name: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"'{name}' must be a positive integer")
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"'{name}' must be a positive integer") from exc
    if number < 1:
        raise ConfigError(f"'{name}' must be a positive integer")
    return number


def _ensure_string_list(value: object, name: str) -> list[str] | None:
    """Return the stripped, non-blank entries, or None when the key is absent."""
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"'{name}' must be a list of strings")
    return [item.strip() for item in value if item.strip()]
