"""Key-scoped snapshot store for in-progress forms.

Persistence here is a convenience: every failure (unreadable file, bad
JSON, disk full, read-only directory) is logged and absorbed, and callers
carry on with their in-memory state.
"""

import copy

from loguru import logger
from tinydb import Query

from ledgerwise.db.repository import open_db


class FormStore:
    def __init__(self, db_path: str | None = "forms.json"):
        self.table = None
        try:
            self.table = open_db(db_path).table("forms")
        except Exception as e:
            logger.error("Form store unavailable ({}), keeping forms in memory only", e)

    def restore(self, key: str, initial: dict) -> dict:
        """Stored snapshot merged over `initial`, or a copy of `initial`."""
        merged = copy.deepcopy(initial)
        if self.table is None:
            return merged
        try:
            doc = self.table.get(Query().key == key)
        except Exception as e:
            logger.error("Error loading form state ({}): {}", key, e)
            return merged
        if doc is None:
            return merged

        stored = doc.get("state")
        if not isinstance(stored, dict):
            logger.error("Ignoring malformed form state ({}): {!r}", key, stored)
            return merged
        # Shallow merge so fields added since the snapshot keep their defaults
        merged.update(copy.deepcopy(stored))
        return merged

    def persist(self, key: str, state: dict) -> None:
        if self.table is None:
            return
        try:
            self.table.upsert({"key": key, "state": state}, Query().key == key)
        except Exception as e:
            logger.error("Error saving form state ({}): {}", key, e)

    def clear(self, key: str, initial: dict) -> dict:
        if self.table is not None:
            try:
                self.table.remove(Query().key == key)
            except Exception as e:
                logger.error("Error clearing form state ({}): {}", key, e)
        return copy.deepcopy(initial)
