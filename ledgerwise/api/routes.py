from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger

from ledgerwise.db.repository import LedgerRepository
from ledgerwise.deps import current_user, get_advisor, get_ledger
from ledgerwise.finance.summary import month_bounds, parse_month
from ledgerwise.llm.advisor import OPERATIONS, FinancialAdvisor
from ledgerwise.models.schemas import (
    AdviceRequest,
    AdviceResult,
    AnomalyResult,
    Budget,
    CreateEntryRequest,
    LedgerEntry,
    ReportRequest,
    ReportResult,
    SetBudgetRequest,
)

router = APIRouter()


# ── Ledger ────────────────────────────────────────────────────────────


@router.post("/transactions", response_model=LedgerEntry)
def create_entry(
    request: CreateEntryRequest,
    user_id: str = Depends(current_user),
    ledger: LedgerRepository = Depends(get_ledger),
):
    entry = LedgerEntry(user_id=user_id, **request.model_dump())
    created = ledger.add_entry(entry)
    logger.info("Recorded {} #{} of {} for {}", created.type, created.id, created.amount, user_id)
    return created


@router.get("/transactions", response_model=list[LedgerEntry])
def list_entries(
    start: date | None = None,
    end: date | None = None,
    user_id: str = Depends(current_user),
    ledger: LedgerRepository = Depends(get_ledger),
):
    """Entries between `start` and `end` (inclusive); defaults to the current month."""
    first, last = month_bounds(date.today())
    return ledger.find_entries(user_id, start or first, end or last)


@router.get("/transactions/{entry_id}", response_model=LedgerEntry)
def get_entry(
    entry_id: int,
    user_id: str = Depends(current_user),
    ledger: LedgerRepository = Depends(get_ledger),
):
    entry = ledger.get_entry(entry_id)
    if entry is None or entry.user_id != user_id:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return entry


@router.delete("/transactions/{entry_id}")
def delete_entry(
    entry_id: int,
    user_id: str = Depends(current_user),
    ledger: LedgerRepository = Depends(get_ledger),
):
    entry = ledger.get_entry(entry_id)
    if entry is None or entry.user_id != user_id:
        raise HTTPException(status_code=404, detail="Transaction not found")
    ledger.delete_entry(entry_id)
    logger.info("Deleted transaction #{}", entry_id)
    return {"detail": "Transaction deleted"}


@router.put("/budget", response_model=Budget)
def set_budget(
    request: SetBudgetRequest,
    user_id: str = Depends(current_user),
    ledger: LedgerRepository = Depends(get_ledger),
):
    budget = ledger.set_budget(user_id, request.amount)
    logger.info("Set monthly budget of {} for {}", budget.amount, user_id)
    return budget


@router.get("/budget", response_model=Budget)
def get_budget(
    user_id: str = Depends(current_user),
    ledger: LedgerRepository = Depends(get_ledger),
):
    budgets = ledger.find_budgets(user_id)
    if not budgets:
        raise HTTPException(status_code=404, detail="No budget set")
    return budgets[0]


# ── AI insights ───────────────────────────────────────────────────────


@router.post("/insights/advice", response_model=AdviceResult)
def financial_advice(
    request: AdviceRequest,
    user_id: str = Depends(current_user),
    advisor: FinancialAdvisor = Depends(get_advisor),
):
    logger.info("Advice requested by {}: {}", user_id, request.question)
    return advisor.get_advice(user_id, request.question)


@router.post("/insights/report", response_model=ReportResult)
def monthly_report(
    request: ReportRequest,
    user_id: str = Depends(current_user),
    advisor: FinancialAdvisor = Depends(get_advisor),
):
    month = None
    if request.month:
        try:
            month = parse_month(request.month)
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid month") from None
    return advisor.generate_monthly_report(user_id, month)


@router.get("/insights/anomalies", response_model=AnomalyResult)
def spending_anomalies(
    months: int = Query(3, ge=1, le=12),
    user_id: str = Depends(current_user),
    advisor: FinancialAdvisor = Depends(get_advisor),
):
    return advisor.detect_anomalies(user_id, months)


@router.get("/insights/{operation}/latest")
def latest_insight(
    operation: str,
    user_id: str = Depends(current_user),
    advisor: FinancialAdvisor = Depends(get_advisor),
):
    if operation not in OPERATIONS:
        raise HTTPException(status_code=404, detail="Unknown insight type")
    result = advisor.latest(user_id, operation)
    if result is None:
        raise HTTPException(status_code=404, detail="No result yet")
    return result
