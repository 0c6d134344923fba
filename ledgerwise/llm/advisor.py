"""AI-backed advice, monthly reports and spending anomaly alerts.

Each operation aggregates ledger data, sends it to the text generator and
returns a result object. Nothing here raises: quota problems come back as
QUOTA_EXCEEDED, every other failure as GENERAL_ERROR.
"""

from datetime import date
from typing import Callable

import pydantic
from loguru import logger

from ledgerwise.db.repository import LedgerRepository
from ledgerwise.finance.summary import (
    build_advice_data,
    build_expense_history,
    build_monthly_snapshot,
)
from ledgerwise.llm.client import TextGenerator
from ledgerwise.llm.interpreter import (
    GENERAL_ERROR,
    QUOTA_EXCEEDED,
    classify_failure,
    extract_json,
)
from ledgerwise.llm.prompts import ADVICE_PROMPT, ANOMALY_PROMPT, REPORT_PROMPT
from ledgerwise.llm.tracker import RequestTracker
from ledgerwise.models.schemas import (
    AdviceResult,
    AIResult,
    AnomalyResult,
    MonthlyReport,
    ReportResult,
    SpendingInsight,
)

QUOTA_MESSAGE = "API quota exceeded. Please try again later or upgrade your plan."

ADVICE = "advice"
REPORT = "report"
ANOMALIES = "anomalies"
OPERATIONS = (ADVICE, REPORT, ANOMALIES)

REPORT_FALLBACK = MonthlyReport().model_dump(by_alias=True)


def _as_prompt_json(data: pydantic.BaseModel) -> str:
    return data.model_dump_json(by_alias=True, indent=2)


def interpret_report(text: str) -> MonthlyReport:
    parsed = extract_json(text, REPORT_FALLBACK)
    try:
        return MonthlyReport.model_validate(parsed)
    except pydantic.ValidationError as e:
        logger.error("Report JSON has unexpected shape: {}", e)
        return MonthlyReport()


def interpret_insights(text: str) -> list[SpendingInsight]:
    parsed = extract_json(text, [])
    if not isinstance(parsed, list):
        logger.error("Expected a JSON array of insights, got {}", type(parsed).__name__)
        return []
    insights = []
    for item in parsed:
        try:
            insights.append(SpendingInsight.model_validate(item))
        except pydantic.ValidationError:
            logger.warning("Dropping malformed insight: {}", item)
    return insights


class FinancialAdvisor:
    def __init__(
        self,
        generator: TextGenerator,
        ledger: LedgerRepository,
        tracker: RequestTracker | None = None,
    ):
        self.generator = generator
        self.ledger = ledger
        self.tracker = tracker or RequestTracker()

    def _run(
        self,
        user_id: str,
        operation: str,
        result_type: type[AIResult],
        payload_field: str,
        fetch: Callable[[], pydantic.BaseModel],
        build_prompt: Callable[[pydantic.BaseModel], str],
        interpret: Callable[[str], object],
        failure_message: str,
    ) -> AIResult:
        token = self.tracker.begin(user_id, operation)
        result = self._call(
            result_type, payload_field, fetch, build_prompt, interpret, failure_message
        )
        if not self.tracker.publish(user_id, operation, token, result):
            logger.info("Discarding superseded {} result for {}", operation, user_id)
            result = result.model_copy(update={"superseded": True})
        return result

    def _call(
        self, result_type, payload_field, fetch, build_prompt, interpret, failure_message
    ) -> AIResult:
        try:
            data = fetch()
        except Exception as e:
            logger.error("{}: {}", failure_message, e)
            return result_type(
                success=False, error=GENERAL_ERROR, message=str(e) or failure_message
            )

        try:
            text = self.generator.generate(build_prompt(data))
        except Exception as e:
            if classify_failure(e) == QUOTA_EXCEEDED:
                logger.warning("LLM quota exceeded: {}", e)
                return result_type(
                    success=False, error=QUOTA_EXCEEDED, message=QUOTA_MESSAGE, data=data
                )
            logger.error("{}: {}", failure_message, e)
            return result_type(
                success=False, error=GENERAL_ERROR, message=str(e) or failure_message
            )

        return result_type(success=True, data=data, **{payload_field: interpret(text)})

    def get_advice(self, user_id: str, question: str) -> AdviceResult:
        return self._run(
            user_id,
            ADVICE,
            AdviceResult,
            "advice",
            fetch=lambda: build_advice_data(self.ledger, user_id),
            build_prompt=lambda data: ADVICE_PROMPT.format(
                question=question, financial_data=_as_prompt_json(data)
            ),
            interpret=lambda text: text,
            failure_message="Failed to generate financial advice",
        )

    def generate_monthly_report(
        self, user_id: str, month: date | None = None
    ) -> ReportResult:
        return self._run(
            user_id,
            REPORT,
            ReportResult,
            "report",
            fetch=lambda: build_monthly_snapshot(self.ledger, user_id, month),
            build_prompt=lambda data: REPORT_PROMPT.format(
                financial_data=_as_prompt_json(data)
            ),
            interpret=interpret_report,
            failure_message="Failed to generate monthly report",
        )

    def detect_anomalies(self, user_id: str, months: int = 3) -> AnomalyResult:
        return self._run(
            user_id,
            ANOMALIES,
            AnomalyResult,
            "insights",
            fetch=lambda: build_expense_history(self.ledger, user_id, months),
            build_prompt=lambda data: ANOMALY_PROMPT.format(
                financial_data=_as_prompt_json(data)
            ),
            interpret=interpret_insights,
            failure_message="Failed to detect spending anomalies",
        )

    def latest(self, user_id: str, operation: str) -> AIResult | None:
        return self.tracker.latest(user_id, operation)
