"""Core modules for EthosRadar."""

from .models import *
from .config import settings
from .errors import InsufficientDataError, MalformedRecordError, R4RError, UpstreamUnavailableError
from .cache import BoundedTTLCache

__all__ = [
    "settings",
    "BoundedTTLCache",
    "R4RError",
    "InsufficientDataError",
    "UpstreamUnavailableError",
    "MalformedRecordError",
    "Sentiment",
    "RiskLevel",
    "Review",
    "ReviewPair",
    "NetworkConnection",
    "HighR4RReviewer",
    "R4RAnalysisResult",
    "R4RSummary",
    "NetworkAnalysisResult",
]
