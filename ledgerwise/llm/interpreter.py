"""Defensive handling of model output and model API failures."""

import copy
import json
import re

from loguru import logger

from ledgerwise.models.schemas import ErrorCode

QUOTA_EXCEEDED: ErrorCode = "QUOTA_EXCEEDED"
GENERAL_ERROR: ErrorCode = "GENERAL_ERROR"

# Case-sensitive on purpose: matched against the raw API error text.
QUOTA_MARKERS = ("429", "quota", "rate limit")

_LEADING_FENCE = re.compile(r"^```[\w+-]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?```$")


def classify_failure(error: BaseException) -> ErrorCode:
    message = str(error)
    if any(marker in message for marker in QUOTA_MARKERS):
        return QUOTA_EXCEEDED
    return GENERAL_ERROR


def strip_code_fences(text: str) -> str:
    cleaned = text.strip()
    cleaned = _LEADING_FENCE.sub("", cleaned, count=1)
    cleaned = _TRAILING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def extract_json(text: str | None, fallback):
    """Parse JSON out of model text, or return a copy of `fallback`.

    Handles replies wrapped in ```json ... ``` fences. Malformed output is
    logged and never raised.
    """
    try:
        return json.loads(strip_code_fences(text or ""))
    except (ValueError, RecursionError) as e:
        logger.error("Failed to parse LLM response as JSON: {}", e)
        return copy.deepcopy(fallback)
