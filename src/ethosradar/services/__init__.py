"""Services for EthosRadar."""

from .ethos_client import EthosClient
from .r4r_analyzer import R4RAnalyzer

__all__ = [
    "EthosClient",
    "R4RAnalyzer",
]
