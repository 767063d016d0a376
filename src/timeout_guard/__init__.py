"""Static detection of PHP HTTP calls made without a timeout."""

from timeout_guard.analyzer import Analyzer
from timeout_guard.models import Issue, IssueType, Severity

__version__ = "0.1.0"

__all__ = ["Analyzer", "Issue", "IssueType", "Severity", "__version__"]
