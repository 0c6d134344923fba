import math
import re

from ledgerwise.models.schemas import Participant

# Leading decimal number; trailing text such as "12abc" or "1,200" is ignored
_LEADING_NUMBER = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_amount(text) -> float:
    """Parse the number a user-typed amount starts with; anything unusable counts as 0."""
    if text is None:
        return 0.0
    match = _LEADING_NUMBER.match(str(text).strip())
    if match is None:
        return 0.0
    value = float(match.group())
    if not math.isfinite(value):
        return 0.0
    return value


def valid_participant_count(participants: list[Participant]) -> int:
    """Participants with a name. Never below 1: with nobody named, the whole
    amount stays with the requester."""
    named = [p for p in participants if p.name.strip()]
    return max(1, len(named))


def split_amount(total_amount, participants: list[Participant]) -> float:
    amount = parse_amount(total_amount)
    if amount <= 0:
        return 0.0
    return amount / valid_participant_count(participants)


def format_amount(value: float) -> str:
    return f"{value:.2f}"
