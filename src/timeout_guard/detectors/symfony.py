from __future__ import annotations

from timeout_guard.detectors.base import Detector
from timeout_guard.detectors.calls import (
    CallSite,
    has_http_verb_argument,
    is_method_call,
    static_call_class_name,
)
from timeout_guard.models import DEFAULT_SYMFONY_CLASS_MARKER

SYMFONY_SUGGESTION = """// Add timeout configuration:
$response = $client->request('GET', $url, [
    'timeout' => 10,  // Request timeout in seconds
]);"""


class SymfonyHttpDetector(Detector):
    library = "Symfony HttpClient"
    message = "Symfony HttpClient request without timeout configuration"
    suggestion = SYMFONY_SUGGESTION

    def __init__(self, class_marker: str = DEFAULT_SYMFONY_CLASS_MARKER) -> None:
        super().__init__()
        self.class_marker = class_marker

    def match(self, call: CallSite) -> str | None:
        if not is_method_call(call, {"request"}):
            return None
        if has_http_verb_argument(call) or self._is_factory_chain(call):
            return call.name
        return None

    def _is_factory_chain(self, call: CallSite) -> bool:
        """HttpClient::create()->request(...) and similar."""
        class_name = static_call_class_name(call.receiver)
        return class_name is not None and self.class_marker in class_name
