from __future__ import annotations

from collections.abc import Callable

from timeout_guard.detectors.base import Detector
from timeout_guard.detectors.curl import CurlDetector
from timeout_guard.detectors.guzzle import GuzzleDetector
from timeout_guard.detectors.symfony import SymfonyHttpDetector
from timeout_guard.models import DetectorSettings

DetectorFactory = Callable[[DetectorSettings], Detector]

# Registration order is part of the output order.
DETECTOR_FACTORIES: tuple[tuple[str, DetectorFactory], ...] = (
    ("symfony", lambda settings: SymfonyHttpDetector(settings.symfony_class_marker)),
    ("curl", lambda settings: CurlDetector(settings.curl_exec_functions)),
    (
        "guzzle",
        lambda settings: GuzzleDetector(
            settings.client_variable_names,
            settings.foreign_client_variable_names,
        ),
    ),
)


def build_detectors(settings: DetectorSettings | None = None) -> list[Detector]:
    settings = settings or DetectorSettings()
    return [factory(settings) for _, factory in DETECTOR_FACTORIES]


__all__ = [
    "DETECTOR_FACTORIES",
    "CurlDetector",
    "Detector",
    "GuzzleDetector",
    "SymfonyHttpDetector",
    "build_detectors",
]
