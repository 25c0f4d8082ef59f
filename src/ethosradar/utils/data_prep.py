"""Data preparation for export."""

import json
from typing import Any, Dict

from ..core.models import NetworkAnalysisResult, R4RAnalysisResult


def prepare_export(analysis: R4RAnalysisResult) -> Dict[str, Any]:
    """Prepare an analysis for JSON export."""
    return {
        "userkey": analysis.userkey,
        "analysis": analysis.to_dict(),
        "metadata": {
            "export_timestamp": None,  # Will be set by caller
            "version": "1.0.0",
        },
    }


def prepare_network_export(result: NetworkAnalysisResult) -> Dict[str, Any]:
    """Prepare a network analysis for JSON export."""
    return {
        "userkeys": [a.userkey for a in result.analyses] + result.unavailable,
        "network": result.to_dict(),
        "metadata": {
            "export_timestamp": None,
            "version": "1.0.0",
        },
    }


def export_to_json(data: Dict[str, Any], filename: str) -> None:
    """Export data to JSON file."""
    import datetime

    # Add timestamp
    data["metadata"]["export_timestamp"] = datetime.datetime.now().isoformat()

    with open(filename, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
