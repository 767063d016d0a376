from __future__ import annotations

from timeout_guard.detectors.base import Detector
from timeout_guard.detectors.calls import (
    CallSite,
    has_http_verb_argument,
    is_method_call,
    variable_name,
)
from timeout_guard.models import (
    DEFAULT_CLIENT_VARIABLE_NAMES,
    DEFAULT_FOREIGN_CLIENT_VARIABLE_NAMES,
)

GUZZLE_METHODS = frozenset({"request", "get", "post", "put", "delete", "patch", "head", "options"})

GUZZLE_SUGGESTION = """// Add timeout configuration:
$response = $client->request('GET', $url, [
    'timeout' => 10,         // Total request timeout
    'connect_timeout' => 3,  // Connection timeout
]);"""


class GuzzleDetector(Detector):
    """Guzzle calls are recognised by receiver variable name only.

    ``$request->get('param')`` and ``$this->client->get()`` are ignored on
    purpose: without type information the variable name is the only hint
    that a receiver is an HTTP client.
    """

    library = "Guzzle"
    message = "Guzzle HTTP request without timeout configuration"
    suggestion = GUZZLE_SUGGESTION

    def __init__(
        self,
        client_variable_names: tuple[str, ...] = DEFAULT_CLIENT_VARIABLE_NAMES,
        foreign_client_variable_names: tuple[str, ...] = DEFAULT_FOREIGN_CLIENT_VARIABLE_NAMES,
    ) -> None:
        super().__init__()
        self.client_variable_names = frozenset(client_variable_names)
        self.foreign_client_variable_names = frozenset(foreign_client_variable_names)

    def match(self, call: CallSite) -> str | None:
        if not is_method_call(call, GUZZLE_METHODS):
            return None

        receiver = variable_name(call.receiver)

        # request('GET', ...) on $httpClient or $symfonyClient is left to the
        # Symfony detector.
        if (
            call.name == "request"
            and has_http_verb_argument(call)
            and receiver in self.foreign_client_variable_names
        ):
            return None

        if receiver in self.client_variable_names:
            return call.name
        return None
