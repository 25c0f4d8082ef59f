"""Utility modules for EthosRadar."""

from .data_prep import export_to_json, prepare_export, prepare_network_export

__all__ = [
    "export_to_json",
    "prepare_export",
    "prepare_network_export",
]
