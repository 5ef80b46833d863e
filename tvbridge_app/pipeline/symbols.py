"""Symbol mapping from normalized webhook symbols to canonical instruments."""

from typing import Mapping

import structlog

from ..storage.base import KeyValueStore

logger = structlog.get_logger(__name__)


class SymbolResolver:
    """Looks up canonical symbols; unmapped symbols pass through unchanged."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def resolve(self, normalized_symbol: str) -> str:
        mapped = self.store.get(normalized_symbol)
        return mapped if mapped else normalized_symbol

    def load_mappings(self, mappings: Mapping[str, str]) -> int:
        """Seed the mapping store, e.g. from ConfigLoader.load_symbol_mappings()."""
        for raw, canonical in mappings.items():
            self.store.put(raw, canonical)

        logger.info("Loaded symbol mappings", count=len(mappings))
        return len(mappings)
