"""Ecowitt Cloud station data source.

Public API:
  - history: fetch_history, parse_history, EcowittProvider
  - client: API URL, time parsing
"""

from fieldheat.datasources.ecowitt.client import HISTORY_API
from fieldheat.datasources.ecowitt.history import EcowittProvider, fetch_history, parse_history

__all__ = [
    "HISTORY_API",
    "EcowittProvider",
    "fetch_history",
    "parse_history",
]
