from __future__ import annotations

from timeout_guard.detectors.base import Detector
from timeout_guard.detectors.calls import CallSite, is_function_call
from timeout_guard.models import DEFAULT_CURL_EXEC_FUNCTIONS

CURL_SUGGESTION = """// Add timeout configuration:
$ch = curl_init($url);
curl_setopt($ch, CURLOPT_TIMEOUT, 10);         // Total timeout
curl_setopt($ch, CURLOPT_CONNECTTIMEOUT, 3);  // Connection timeout
$response = curl_exec($ch);
curl_close($ch);"""


class CurlDetector(Detector):
    library = "cURL"
    message = "cURL request without timeout configuration"
    suggestion = CURL_SUGGESTION

    def __init__(self, exec_functions: tuple[str, ...] = DEFAULT_CURL_EXEC_FUNCTIONS) -> None:
        super().__init__()
        self.exec_functions = frozenset(exec_functions)

    def match(self, call: CallSite) -> str | None:
        if is_function_call(call, self.exec_functions):
            return call.name
        return None

    def has_timeout(self, call: CallSite) -> bool:
        # Options live on the handle via curl_setopt(), which would need
        # data-flow tracking across statements. Every exec call is flagged.
        return False
