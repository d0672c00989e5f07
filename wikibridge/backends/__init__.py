"""Protocol backends: the REST API and its Action API emulation."""

from wikibridge.backends.base import HISTORY_COUNT_TYPES, HISTORY_FILTERS, WikiBackend
from wikibridge.backends.legacy import LegacyBackend
from wikibridge.backends.rest import ModernBackend

__all__ = [
    "WikiBackend",
    "ModernBackend",
    "LegacyBackend",
    "HISTORY_FILTERS",
    "HISTORY_COUNT_TYPES",
]
