"""Net worth and balance totals in the display currency."""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from finance_tracker.domain.records import HoldingKind
from finance_tracker.exceptions import FinanceTrackerError
from finance_tracker.logging_config import get_logger, log_context
from finance_tracker.repositories.interfaces import HoldingsRepository
from finance_tracker.services.display_currency import DisplayCurrencyState

logger = get_logger(__name__)

SUMMARY_FAILED_MESSAGE = "Failed to load financial data"


@dataclass(frozen=True, slots=True)
class FinancialSummary:
    total_assets: float = 0.0
    total_liabilities: float = 0.0
    net_worth: float = 0.0
    total_bank_balance: float = 0.0
    is_loading: bool = False
    error: str | None = None


class FinancialSummaryService:
    def __init__(
        self,
        holdings_repo: HoldingsRepository,
        display_state: DisplayCurrencyState,
    ) -> None:
        self._holdings = holdings_repo
        self._display = display_state

    def summarize(self, user_id: str | None) -> FinancialSummary:
        if not user_id or self._display.exchange_rates is None:
            return FinancialSummary()

        with log_context(user_id=user_id):
            try:
                total_assets = self._total(HoldingKind.ASSET, user_id)
                total_liabilities = self._total(HoldingKind.LIABILITY, user_id)
                total_bank_balance = self._total(HoldingKind.BANK_ACCOUNT, user_id)
            except (FinanceTrackerError, httpx.HTTPError) as e:
                logger.error("financial_summary_failed", error=str(e))
                return FinancialSummary(error=SUMMARY_FAILED_MESSAGE)

            summary = FinancialSummary(
                total_assets=total_assets,
                total_liabilities=total_liabilities,
                net_worth=total_assets - total_liabilities,
                total_bank_balance=total_bank_balance,
            )
            logger.debug(
                "financial_summary_computed",
                display_currency=self._display.display_currency.value,
                net_worth=summary.net_worth,
            )
            return summary

    def _total(self, kind: HoldingKind, user_id: str) -> float:
        return sum(
            (
                self._display.convert_to_display_currency(row.amount, row.currency)
                for row in self._holdings.list_rows(kind, user_id)
            ),
            0.0,
        )
