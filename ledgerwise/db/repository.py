from datetime import date

from tinydb import TinyDB, Query
from tinydb.storages import MemoryStorage

from ledgerwise.models.schemas import Budget, EntryType, LedgerEntry


def open_db(db_path: str | None) -> TinyDB:
    """Open a TinyDB file, or an in-memory database when no path is given."""
    if db_path is None:
        return TinyDB(storage=MemoryStorage)
    return TinyDB(db_path)


class LedgerRepository:
    def __init__(self, db_path: str | None = "ledger.json"):
        self.db = open_db(db_path)
        self.entries = self.db.table("transactions")
        self.budgets = self.db.table("budgets")

    def add_entry(self, entry: LedgerEntry) -> LedgerEntry:
        data = entry.model_dump(mode="json")
        data.pop("id", None)
        doc_id = self.entries.insert(data)
        entry.id = doc_id
        return entry

    def get_entry(self, id: int) -> LedgerEntry | None:
        doc = self.entries.get(doc_id=id)
        if doc is None:
            return None
        return LedgerEntry(id=doc.doc_id, **doc)

    def find_entries(
        self,
        user_id: str,
        start: date,
        end: date,
        type: EntryType | None = None,
    ) -> list[LedgerEntry]:
        """Entries for a user dated within [start, end], newest first."""
        Entry = Query()
        # ISO dates compare correctly as strings
        condition = (
            (Entry.user_id == user_id)
            & (Entry.date >= start.isoformat())
            & (Entry.date <= end.isoformat())
        )
        if type:
            condition &= Entry.type == type
        docs = self.entries.search(condition)
        entries = [LedgerEntry(id=doc.doc_id, **doc) for doc in docs]
        entries.sort(key=lambda e: e.date, reverse=True)
        return entries

    def delete_entry(self, id: int) -> bool:
        doc = self.entries.get(doc_id=id)
        if doc is None:
            return False
        self.entries.remove(doc_ids=[id])
        return True

    def set_budget(self, user_id: str, amount) -> Budget:
        B = Query()
        budget = Budget(user_id=user_id, amount=amount)
        data = budget.model_dump(mode="json")
        data.pop("id", None)
        doc_ids = self.budgets.upsert(data, B.user_id == user_id)
        budget.id = doc_ids[0]
        return budget

    def find_budgets(self, user_id: str) -> list[Budget]:
        B = Query()
        docs = self.budgets.search(B.user_id == user_id)
        return [Budget(id=doc.doc_id, **doc) for doc in docs]
