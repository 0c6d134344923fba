"""Monthly income/expense aggregates used as prompt input for the AI features."""

import calendar
from datetime import date
from decimal import Decimal

from ledgerwise.db.repository import LedgerRepository
from ledgerwise.models.schemas import (
    AdviceData,
    BudgetLimits,
    ExpenseHistory,
    ExpenseItem,
    LedgerEntry,
    MonthExpenses,
    MonthlySnapshot,
    MonthSummary,
)

UNCATEGORIZED = "other"


def parse_month(text: str) -> date:
    """'YYYY-MM' -> first day of that month."""
    year, month = text.split("-")
    return date(int(year), int(month), 1)


def month_bounds(month: date) -> tuple[date, date]:
    """First and last calendar day of the month containing `month`."""
    last_day = calendar.monthrange(month.year, month.month)[1]
    return month.replace(day=1), month.replace(day=last_day)


def shift_month(month: date, offset: int) -> date:
    index = month.year * 12 + (month.month - 1) + offset
    return date(index // 12, index % 12 + 1, 1)


def previous_month(month: date) -> date:
    return shift_month(month, -1)


def month_label(month: date) -> str:
    return month.strftime("%Y-%m")


def _total(entries: list[LedgerEntry]) -> Decimal:
    return sum((e.amount for e in entries), Decimal(0))


def spending_by_category(expenses: list[LedgerEntry]) -> dict[str, float]:
    totals: dict[str, Decimal] = {}
    for e in expenses:
        category = e.category or UNCATEGORIZED
        totals[category] = totals.get(category, Decimal(0)) + e.amount
    return {category: float(amount) for category, amount in totals.items()}


def summarize_month(entries: list[LedgerEntry], month: date) -> MonthSummary:
    income = _total([e for e in entries if e.type == "INCOME"])
    expenses = [e for e in entries if e.type == "EXPENSE"]
    spent = _total(expenses)
    return MonthSummary(
        month=month_label(month),
        total_income=float(income),
        total_expenses=float(spent),
        net_income=float(income - spent),
        category_spending=spending_by_category(expenses),
        transaction_count=len(entries),
    )


def budget_limits(ledger: LedgerRepository, user_id: str) -> BudgetLimits | None:
    budgets = ledger.find_budgets(user_id)
    if not budgets:
        return None
    return BudgetLimits(total=float(budgets[0].amount))


def _entries_for_month(
    ledger: LedgerRepository, user_id: str, month: date, type=None
) -> list[LedgerEntry]:
    start, end = month_bounds(month)
    return ledger.find_entries(user_id, start, end, type=type)


def build_monthly_snapshot(
    ledger: LedgerRepository, user_id: str, month: date | None = None
) -> MonthlySnapshot:
    """Target month (default: this month) next to the month before it."""
    current = (month or date.today()).replace(day=1)
    previous = previous_month(current)
    return MonthlySnapshot(
        current_month=summarize_month(
            _entries_for_month(ledger, user_id, current), current
        ),
        previous_month=summarize_month(
            _entries_for_month(ledger, user_id, previous), previous
        ),
        budget_limits=budget_limits(ledger, user_id),
    )


def build_advice_data(
    ledger: LedgerRepository, user_id: str, month: date | None = None
) -> AdviceData:
    entries = _entries_for_month(ledger, user_id, month or date.today())
    income = _total([e for e in entries if e.type == "INCOME"])
    expenses = [
        ExpenseItem(
            category=e.category,
            amount=float(e.amount),
            date=e.date.isoformat(),
            description=e.description,
        )
        for e in entries
        if e.type == "EXPENSE"
    ]
    return AdviceData(
        monthly_income=float(income),
        expense_transactions=expenses,
        monthly_budgets=budget_limits(ledger, user_id),
    )


def build_expense_history(
    ledger: LedgerRepository, user_id: str, months: int = 3, today: date | None = None
) -> ExpenseHistory:
    """Expense totals for the last `months` months, oldest first."""
    current = (today or date.today()).replace(day=1)
    monthly = []
    for offset in range(months - 1, -1, -1):
        month = shift_month(current, -offset)
        expenses = _entries_for_month(ledger, user_id, month, type="EXPENSE")
        monthly.append(
            MonthExpenses(
                month=month_label(month),
                total_expenses=float(_total(expenses)),
                by_category=spending_by_category(expenses),
                transaction_count=len(expenses),
            )
        )
    return ExpenseHistory(
        monthly_data=monthly, budget_limits=budget_limits(ledger, user_id)
    )
