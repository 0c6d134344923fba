"""Split-expense endpoints.

ValidationError and StatusTransitionError raised below are turned into 400
and 409 responses by the handlers registered in main.py.
"""

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from ledgerwise.deps import current_user, get_split_sessions
from ledgerwise.models.schemas import (
    LinkResponse,
    ParticipantRequest,
    PaymentRequestResponse,
    SplitView,
    UpdateSplitRequest,
    UpiLinkRequest,
    WhatsAppLinkRequest,
)
from ledgerwise.split.links import build_upi_payment_link, build_whatsapp_request_link
from ledgerwise.split.session import SplitSession, SplitSessionRegistry

router = APIRouter(prefix="/split", tags=["split"])

# Path segments owned by other split routes, never usable as form keys
RESERVED_KEYS = {"links"}


def user_session(
    form_key: str,
    user_id: str = Depends(current_user),
    sessions: SplitSessionRegistry = Depends(get_split_sessions),
) -> SplitSession:
    if form_key in RESERVED_KEYS:
        raise HTTPException(status_code=404, detail="Form not found")
    return sessions.get(user_id, form_key)


def _check_index(session: SplitSession, index: int) -> None:
    if index < 0 or index >= len(session.form.participants):
        raise HTTPException(status_code=404, detail="Participant not found")


@router.post("/links/upi", response_model=LinkResponse)
def upi_link(request: UpiLinkRequest):
    url = build_upi_payment_link(
        request.upi_id, request.name, request.amount, request.note
    )
    return LinkResponse(url=url)


@router.post("/links/whatsapp", response_model=LinkResponse)
def whatsapp_link(request: WhatsAppLinkRequest):
    url = build_whatsapp_request_link(
        request.phone_number,
        request.receiver_name,
        request.requester_name,
        request.amount,
        request.reason,
        request.requester_upi_id,
    )
    return LinkResponse(url=url)


@router.get("/{form_key}", response_model=SplitView)
def get_split(session: SplitSession = Depends(user_session)):
    return session.view()


@router.patch("/{form_key}", response_model=SplitView)
def update_split(
    request: UpdateSplitRequest, session: SplitSession = Depends(user_session)
):
    session.update(**request.model_dump(exclude_none=True))
    return session.view()


@router.delete("/{form_key}", response_model=SplitView)
def clear_split(session: SplitSession = Depends(user_session)):
    session.clear()
    return session.view()


@router.post("/{form_key}/participants", response_model=SplitView)
def add_participant(
    request: ParticipantRequest | None = None,
    session: SplitSession = Depends(user_session),
):
    index = session.add_participant()
    if request is not None:
        session.update_participant(index, request.name, request.phone_number)
    return session.view()


@router.patch("/{form_key}/participants/{index}", response_model=SplitView)
def update_participant(
    index: int,
    request: ParticipantRequest,
    session: SplitSession = Depends(user_session),
):
    _check_index(session, index)
    session.update_participant(index, request.name, request.phone_number)
    return session.view()


@router.delete("/{form_key}/participants/{index}", response_model=SplitView)
def remove_participant(index: int, session: SplitSession = Depends(user_session)):
    _check_index(session, index)
    session.remove_participant(index)
    logger.info("Removed participant {} from {}", index + 1, session.key)
    return session.view()


@router.post(
    "/{form_key}/participants/{index}/request", response_model=PaymentRequestResponse
)
def request_payment(index: int, session: SplitSession = Depends(user_session)):
    """WhatsApp link for the client to open; the participant becomes `requested`."""
    _check_index(session, index)
    url = session.request_payment(index)
    return PaymentRequestResponse(url=url, view=session.view())


@router.post("/{form_key}/participants/{index}/paid", response_model=SplitView)
def mark_paid(index: int, session: SplitSession = Depends(user_session)):
    _check_index(session, index)
    session.mark_paid(index)
    return session.view()
