from functools import lru_cache

from fastapi import Header

from ledgerwise.config import get_settings
from ledgerwise.db.repository import LedgerRepository
from ledgerwise.llm.advisor import FinancialAdvisor
from ledgerwise.llm.client import OpenRouterGenerator, TextGenerator
from ledgerwise.split.session import SplitSessionRegistry
from ledgerwise.store.forms import FormStore


def current_user(x_user_id: str = Header("local")) -> str:
    return x_user_id


@lru_cache
def get_ledger() -> LedgerRepository:
    return LedgerRepository(get_settings().db_path)


@lru_cache
def get_generator() -> TextGenerator:
    settings = get_settings()
    return OpenRouterGenerator(
        api_key=settings.openrouter_api_key,
        model=settings.llm_model,
        base_url=settings.llm_base_url,
    )


@lru_cache
def get_advisor() -> FinancialAdvisor:
    return FinancialAdvisor(get_generator(), get_ledger())


@lru_cache
def get_split_sessions() -> SplitSessionRegistry:
    settings = get_settings()
    return SplitSessionRegistry(
        FormStore(settings.forms_path),
        settings.default_requester_name,
        settings.max_split_sessions,
    )
