import threading
from collections import OrderedDict

import pydantic
from loguru import logger

from ledgerwise.errors import StatusTransitionError, ValidationError
from ledgerwise.models.schemas import (
    Participant,
    ParticipantView,
    SplitExpenseForm,
    SplitView,
)
from ledgerwise.split.calculator import (
    format_amount,
    parse_amount,
    split_amount,
    valid_participant_count,
)
from ledgerwise.split.links import build_whatsapp_request_link
from ledgerwise.split.status import REQUESTED, PaymentTracker
from ledgerwise.store.forms import FormStore

DEFAULT_REASON = "Split expense"


def _snapshot(form: SplitExpenseForm) -> dict:
    return form.model_dump(mode="json", by_alias=True)


class SplitSession:
    """One split-expense form, mirrored to the form store after every change."""

    def __init__(
        self,
        store: FormStore,
        key: str,
        defaults: SplitExpenseForm,
        owner: str = "local",
    ):
        self.store = store
        self.key = key
        self.owner = owner
        self.store_key = f"{owner}:{key}"
        self.defaults = defaults
        self.form = self._restore()
        self.tracker = PaymentTracker(self.form.payment_status)

    def _restore(self) -> SplitExpenseForm:
        data = self.store.restore(self.store_key, _snapshot(self.defaults))
        try:
            return SplitExpenseForm.model_validate(data)
        except pydantic.ValidationError as e:
            logger.error("Discarding unreadable split form ({}): {}", self.store_key, e)
            return self.defaults.model_copy(deep=True)

    def _save(self) -> None:
        self.form.payment_status = dict(self.tracker.statuses)
        self.store.persist(self.store_key, _snapshot(self.form))

    def _participant(self, index: int) -> Participant:
        if index < 0 or index >= len(self.form.participants):
            raise IndexError(f"No participant at position {index + 1}")
        return self.form.participants[index]

    @property
    def split_amount(self) -> float:
        return split_amount(self.form.total_amount, self.form.participants)

    def update(self, **fields) -> None:
        updates = {k: v for k, v in fields.items() if v is not None}
        for name, value in updates.items():
            setattr(self.form, name, value)
        self._save()

    def add_participant(self) -> int:
        self.form.participants.append(Participant())
        self._save()
        return len(self.form.participants) - 1

    def update_participant(
        self, index: int, name: str | None = None, phone_number: str | None = None
    ) -> Participant:
        participant = self._participant(index)
        if name is not None:
            participant.name = name
        if phone_number is not None:
            participant.phone_number = phone_number
        self._save()
        return participant

    def remove_participant(self, index: int) -> None:
        self._participant(index)
        if len(self.form.participants) <= 1:
            raise ValidationError("At least one participant is required")
        del self.form.participants[index]
        self.tracker.remove(index)
        self._save()

    def request_payment(self, index: int) -> str:
        """WhatsApp link asking participant `index` for their share; marks them requested."""
        participant = self._participant(index)
        form = self.form
        if not form.requester_name or not form.requester_upi_id:
            raise ValidationError("Please fill in requester name and UPI ID")
        if not participant.name:
            raise ValidationError("Please fill in participant name")
        if not participant.phone_number:
            raise ValidationError("Please fill in phone number to send WhatsApp message")
        if not self.tracker.can_transition(index, REQUESTED):
            raise StatusTransitionError(index, self.tracker.status_of(index), REQUESTED)

        url = build_whatsapp_request_link(
            participant.phone_number,
            participant.name,
            form.requester_name,
            self.split_amount,
            form.description or DEFAULT_REASON,
            form.requester_upi_id,
        )
        self.tracker.mark_requested(index)
        self._save()
        logger.info("Payment requested from {} ({})", participant.name, self.key)
        return url

    def mark_paid(self, index: int) -> None:
        participant = self._participant(index)
        self.tracker.mark_paid(index)
        self._save()
        logger.info("Marked {} as paid ({})", participant.name, self.key)

    def clear(self) -> None:
        data = self.store.clear(self.store_key, _snapshot(self.defaults))
        self.form = SplitExpenseForm.model_validate(data)
        self.tracker = PaymentTracker()
        logger.info("Cleared split form {}", self.key)

    def issues(self) -> list[str]:
        """Problems that would block submitting the form."""
        form = self.form
        problems = []
        if not form.total_amount:
            problems.append("Amount is required")
        elif parse_amount(form.total_amount) <= 0:
            problems.append("Amount must be a positive number")
        if not form.requester_name:
            problems.append("Requester name is required")
        if not form.requester_upi_id:
            problems.append("Requester UPI ID is required")
        elif "@" not in form.requester_upi_id:
            problems.append("Invalid UPI ID format (must include @)")
        if not form.description:
            problems.append("Description is required")
        if not form.participants:
            problems.append("At least one participant is required")
        for i, p in enumerate(form.participants, 1):
            if not p.name:
                problems.append(f"Participant {i}: Name is required")
            if not p.phone_number:
                problems.append(f"Participant {i}: Phone number is required")
        return problems

    def view(self) -> SplitView:
        amount = self.split_amount
        requests = [
            ParticipantView(
                index=i,
                name=p.name,
                phone_number=p.phone_number,
                status=self.tracker.status_of(i),
                amount_due=format_amount(amount),
            )
            for i, p in enumerate(self.form.participants)
            if p.name.strip()
        ]
        return SplitView(
            form_key=self.key,
            form=self.form,
            split_amount=amount,
            split_amount_display=format_amount(amount),
            valid_participants=valid_participant_count(self.form.participants),
            requests=requests,
            issues=self.issues(),
        )


class SplitSessionRegistry:
    """Live split sessions by (user, form key), restored from the store on first use.

    At most `max_sessions` stay live; the least recently used one is dropped
    first and restored from the store when it is next asked for.
    """

    def __init__(
        self,
        store: FormStore,
        default_requester_name: str = "",
        max_sessions: int = 256,
    ):
        self.store = store
        self.default_requester_name = default_requester_name
        self.max_sessions = max_sessions
        self._sessions: OrderedDict[tuple[str, str], SplitSession] = OrderedDict()
        self._lock = threading.Lock()

    def defaults(self) -> SplitExpenseForm:
        return SplitExpenseForm(requester_name=self.default_requester_name)

    def get(self, user_id: str, key: str) -> SplitSession:
        with self._lock:
            session = self._sessions.get((user_id, key))
            if session is None:
                session = SplitSession(self.store, key, self.defaults(), owner=user_id)
                self._sessions[(user_id, key)] = session
            self._sessions.move_to_end((user_id, key))
            while len(self._sessions) > self.max_sessions:
                (owner, dropped), _ = self._sessions.popitem(last=False)
                logger.debug("Dropped idle split form {} of {}", dropped, owner)
            return session
