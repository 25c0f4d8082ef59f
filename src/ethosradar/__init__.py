"""EthosRadar - review-for-review (R4R) farming detection for Ethos."""

__version__ = "1.0.0"
__author__ = "EthosRadar Team"

from .core.models import *
from .core.config import settings
from .services.ethos_client import EthosClient
from .services.r4r_analyzer import R4RAnalyzer

__all__ = [
    "settings",
    "EthosClient",
    "R4RAnalyzer",
]
