import datetime as dt
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

EntryType = Literal["INCOME", "EXPENSE"]
PaymentStatus = Literal["pending", "requested", "paid"]
RiskLevel = Literal["Low", "Medium", "High"]
ErrorCode = Literal["QUOTA_EXCEEDED", "GENERAL_ERROR"]


class CamelModel(BaseModel):
    """Base for models exchanged with the browser and the model prompts (camelCase keys)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SnapshotModel(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )


# ── Ledger ────────────────────────────────────────────────────────────


class LedgerEntry(BaseModel):
    id: int | None = None
    user_id: str
    type: EntryType
    amount: Decimal
    category: str | None = None
    date: dt.date
    description: str | None = None


class Budget(BaseModel):
    id: int | None = None
    user_id: str
    amount: Decimal


class CreateEntryRequest(BaseModel):
    type: EntryType
    amount: Decimal = Field(gt=0)
    category: str | None = None
    date: dt.date = Field(default_factory=dt.date.today)
    description: str | None = None


class SetBudgetRequest(BaseModel):
    amount: Decimal = Field(gt=0)


# ── Split expense ─────────────────────────────────────────────────────


class Participant(CamelModel):
    name: str = ""
    phone_number: str = ""


class SplitExpenseForm(CamelModel):
    total_amount: str = ""
    requester_name: str = ""
    requester_upi_id: str = ""
    description: str = ""
    participants: list[Participant] = Field(default_factory=lambda: [Participant()])
    payment_status: dict[int, PaymentStatus] = {}


class ParticipantView(CamelModel):
    index: int
    name: str
    phone_number: str
    status: PaymentStatus
    amount_due: str


class SplitView(CamelModel):
    form_key: str
    form: SplitExpenseForm
    split_amount: float
    split_amount_display: str
    valid_participants: int
    requests: list[ParticipantView]
    issues: list[str]


class UpdateSplitRequest(CamelModel):
    total_amount: str | None = None
    requester_name: str | None = None
    requester_upi_id: str | None = None
    description: str | None = None


class ParticipantRequest(CamelModel):
    name: str | None = None
    phone_number: str | None = None


class PaymentRequestResponse(CamelModel):
    url: str
    view: SplitView


class UpiLinkRequest(CamelModel):
    upi_id: str
    name: str
    amount: float
    note: str = ""


class WhatsAppLinkRequest(CamelModel):
    phone_number: str
    receiver_name: str
    requester_name: str
    amount: float
    reason: str
    requester_upi_id: str


class LinkResponse(BaseModel):
    url: str


# ── Financial summaries (prompt input) ────────────────────────────────


class MonthSummary(SnapshotModel):
    month: str
    total_income: float
    total_expenses: float
    net_income: float
    category_spending: dict[str, float]
    transaction_count: int


class BudgetLimits(SnapshotModel):
    total: float
    # Per-category budgets are not modelled yet; always empty.
    by_category: dict[str, float] = {}


class MonthlySnapshot(SnapshotModel):
    current_month: MonthSummary
    previous_month: MonthSummary
    budget_limits: BudgetLimits | None = None


class ExpenseItem(SnapshotModel):
    category: str | None = None
    amount: float
    date: str
    description: str | None = None


class AdviceData(SnapshotModel):
    monthly_income: float
    expense_transactions: list[ExpenseItem]
    monthly_budgets: BudgetLimits | None = None


class MonthExpenses(SnapshotModel):
    month: str
    total_expenses: float
    by_category: dict[str, float]
    transaction_count: int


class ExpenseHistory(SnapshotModel):
    monthly_data: list[MonthExpenses]
    budget_limits: BudgetLimits | None = None


# ── AI output ─────────────────────────────────────────────────────────


class ProblemArea(CamelModel):
    category: str = ""
    issue: str = ""
    impact: str = ""


class MonthlyReport(CamelModel):
    monthly_summary: str = ""
    key_observations: list[str] = []
    problem_areas: list[ProblemArea] = []
    ai_recommendations: list[str] = []
    next_month_action_plan: list[str] = []


class SpendingInsight(CamelModel):
    title: str
    explanation: str
    risk_level: RiskLevel
    suggested_action: str


class AIResult(CamelModel):
    success: bool
    error: ErrorCode | None = None
    message: str | None = None
    # True when a newer call for the same user and operation was started first
    superseded: bool = False


class AdviceResult(AIResult):
    advice: str | None = None
    data: AdviceData | None = None


class ReportResult(AIResult):
    report: MonthlyReport | None = None
    data: MonthlySnapshot | None = None


class AnomalyResult(AIResult):
    insights: list[SpendingInsight] = []
    data: ExpenseHistory | None = None


class AdviceRequest(BaseModel):
    question: str = Field(min_length=1)


class ReportRequest(BaseModel):
    month: str | None = Field(default=None, pattern=r"^\d{4}-\d{2}$")
