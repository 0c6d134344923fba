from ledgerwise.errors import StatusTransitionError
from ledgerwise.models.schemas import PaymentStatus

PENDING: PaymentStatus = "pending"
REQUESTED: PaymentStatus = "requested"
PAID: PaymentStatus = "paid"

# Re-sending a request is allowed; paid is terminal.
TRANSITIONS: dict[str, set[str]] = {
    PENDING: {REQUESTED},
    REQUESTED: {REQUESTED, PAID},
    PAID: set(),
}


class PaymentTracker:
    """Per-participant request status, keyed by participant index.

    Purely advisory: nothing here touches the ledger.
    """

    def __init__(self, statuses: dict[int, PaymentStatus] | None = None):
        self.statuses: dict[int, PaymentStatus] = dict(statuses or {})

    def status_of(self, index: int) -> PaymentStatus:
        return self.statuses.get(index, PENDING)

    def can_transition(self, index: int, target: PaymentStatus) -> bool:
        return target in TRANSITIONS[self.status_of(index)]

    def advance(self, index: int, target: PaymentStatus) -> None:
        current = self.status_of(index)
        if target not in TRANSITIONS[current]:
            raise StatusTransitionError(index, current, target)
        self.statuses[index] = target

    def mark_requested(self, index: int) -> None:
        self.advance(index, REQUESTED)

    def mark_paid(self, index: int) -> None:
        self.advance(index, PAID)

    def remove(self, index: int) -> None:
        """Drop a participant's status and shift later ones down to match the new indices."""
        reindexed = {}
        for key, status in self.statuses.items():
            if key < index:
                reindexed[key] = status
            elif key > index:
                reindexed[key - 1] = status
        self.statuses = reindexed
