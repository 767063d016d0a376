from __future__ import annotations

from abc import ABC, abstractmethod

import tree_sitter as ts

from timeout_guard.detectors.calls import CallSite, as_call_site, has_option
from timeout_guard.models import Issue, IssueType, Severity
from timeout_guard.parsing import walk


class Detector(ABC):
    """Stateful visitor that collects missing-timeout issues for one tree.

    ``visit`` is fed every node of a pre-order walk. Findings stay in a
    private list until ``issues`` copies them out; ``reset`` must run before
    the detector sees the next tree. ``scan`` does the whole cycle.
    """

    library: str = ""
    message: str = ""
    suggestion: str = ""

    def __init__(self) -> None:
        self._issues: list[Issue] = []

    def visit(self, node: ts.Node) -> None:
        call = as_call_site(node)
        if call is None:
            return
        method = self.match(call)
        if method is not None and not self.has_timeout(call):
            self._issues.append(self.build_issue(call, method))

    @abstractmethod
    def match(self, call: CallSite) -> str | None:
        """Return the method name to report when ``call`` belongs to this library."""
        raise NotImplementedError

    def has_timeout(self, call: CallSite) -> bool:
        return has_option(call, "timeout")

    def build_issue(self, call: CallSite, method: str) -> Issue:
        return Issue(
            line=call.line,
            type=IssueType.MISSING_TIMEOUT,
            library=self.library,
            method=method,
            severity=Severity.HIGH,
            message=self.message,
            suggestion=self.suggestion,
        )

    def issues(self) -> list[Issue]:
        return list(self._issues)

    def reset(self) -> None:
        self._issues = []

    def scan(self, tree: ts.Tree) -> list[Issue]:
        self.reset()
        for node in walk(tree.root_node):
            self.visit(node)
        found = self.issues()
        self.reset()
        return found
