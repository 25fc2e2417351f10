"""
Aggregation service for financial summaries, category breakdowns and budgets.

Handles:
1. Scoped totals (income, expenses, savings rate) for a month or all-time
2. Net balance reconciliation against manual balance adjustments
3. Category-wise expense breakdown
4. Budget progress per category

Monthly adjustments are absolute balance targets ("at the end of this month
the balance is X"). For a month without its own target, the correction
computed at the most recent earlier target is carried forward, so the running
balance stays consistent without a fresh adjustment every month.
"""
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from finance_tracker.schemas import (
    BudgetStatus,
    CategoryBreakdown,
    FinancialSummary,
    RecordKind,
)
from finance_tracker.services.periods import (
    is_scoped,
    month_bounds,
    scope_bounds,
    validate_scope,
)
from finance_tracker.stores.base import AdjustmentStore, BudgetStore, RecordStore

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


def round_currency(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def percentage_of(part: Decimal, whole: Decimal) -> Decimal:
    if whole <= 0:
        return ZERO
    return part / whole * HUNDRED


class AnalyticsService:
    """Read-only aggregation over the record and adjustment stores."""

    def __init__(
        self,
        records: RecordStore,
        adjustments: AdjustmentStore,
        budgets: Optional[BudgetStore] = None,
    ):
        self.records = records
        self.adjustments = adjustments
        self.budgets = budgets

    def _raw_balance_until(self, end) -> Decimal:
        """Income minus expenses over every record dated before end (all-time if None)."""
        income = self.records.sum_amounts(RecordKind.INCOME, end=end)
        expenses = self.records.sum_amounts(RecordKind.OUTCOME, end=end)
        return income - expenses

    def _global_adjustment(self) -> Decimal:
        value = self.adjustments.get_adjustment()
        return ZERO if value is None else value

    def _effective_adjustment(self, month: int, year: int, cumulative_balance: Decimal) -> Decimal:
        """
        Correction delta to add to the raw cumulative balance of (year, month).

        An explicit target for the month yields target - raw balance. Otherwise the
        delta computed at the latest earlier target applies. With no target at all,
        the global adjustment is used.
        """
        stored = self.adjustments.get_adjustment(month, year)
        if stored is not None:
            return stored - cumulative_balance

        checkpoint = self.adjustments.get_most_recent_adjustment_before(month, year)
        if checkpoint is not None:
            _, checkpoint_end = month_bounds(checkpoint.month, checkpoint.year)
            checkpoint_balance = self._raw_balance_until(checkpoint_end)
            logger.debug(
                f"[SUMMARY] Carrying adjustment from {checkpoint.year}-{checkpoint.month:02d} "
                f"target={checkpoint.amount} raw={checkpoint_balance}"
            )
            return checkpoint.amount - checkpoint_balance

        return self._global_adjustment()

    def get_financial_summary(
        self, month: Optional[int] = None, year: Optional[int] = None
    ) -> FinancialSummary:
        """
        Totals for the scope plus the reconciled net balance.

        Unscoped queries (month or year missing) cover all records and use the
        global adjustment only.
        """
        validate_scope(month, year)
        start, end = scope_bounds(month, year)

        scoped_income = self.records.sum_amounts(RecordKind.INCOME, start, end)
        scoped_expenses = self.records.sum_amounts(RecordKind.OUTCOME, start, end)
        cumulative_balance = self._raw_balance_until(end)

        if is_scoped(month, year):
            adjustment = self._effective_adjustment(month, year, cumulative_balance)
        else:
            adjustment = self._global_adjustment()

        net_balance = round_currency(cumulative_balance + adjustment)
        if scoped_income > 0:
            savings_rate = (scoped_income - scoped_expenses) / scoped_income * HUNDRED
        else:
            savings_rate = ZERO

        scope = f"{year}-{month:02d}" if is_scoped(month, year) else "all-time"
        logger.info(
            f"[SUMMARY] scope={scope} income={scoped_income} expenses={scoped_expenses} "
            f"net={net_balance} adjustment={adjustment}"
        )
        return FinancialSummary(
            total_income=float(scoped_income),
            total_expenses=float(scoped_expenses),
            net_balance=float(net_balance),
            savings_rate=float(savings_rate),
            manual_adjustment=float(round_currency(adjustment)),
        )

    def get_category_breakdown(
        self, month: Optional[int] = None, year: Optional[int] = None
    ) -> List[CategoryBreakdown]:
        validate_scope(month, year)
        start, end = scope_bounds(month, year)
        totals = self.records.sum_by_category(RecordKind.OUTCOME, start, end)
        total_expenses = sum(totals.values(), ZERO)

        ordered = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
        return [
            CategoryBreakdown(
                category=category,
                amount=float(amount),
                percentage=float(percentage_of(amount, total_expenses)),
            )
            for category, amount in ordered
        ]

    def adjust_balance(
        self, amount: Decimal, month: Optional[int] = None, year: Optional[int] = None
    ) -> None:
        """Store a balance target for (year, month), or the global value when unscoped."""
        validate_scope(month, year)
        if is_scoped(month, year):
            self.adjustments.set_adjustment(amount, month, year)
        else:
            self.adjustments.set_adjustment(amount)

    def get_budget_status(
        self, month: Optional[int] = None, year: Optional[int] = None
    ) -> List[BudgetStatus]:
        """Spending against each budget limit within the scope."""
        if self.budgets is None:
            return []
        validate_scope(month, year)
        start, end = scope_bounds(month, year)
        spent_by_category = self.records.sum_by_category(RecordKind.OUTCOME, start, end)

        statuses = []
        for budget in self.budgets.list_budgets():
            spent = spent_by_category.get(budget.category, ZERO)
            statuses.append(
                BudgetStatus(
                    id=budget.id,
                    category=budget.category,
                    limit=float(budget.limit),
                    period=budget.period,
                    spent=float(spent),
                    remaining=float(budget.limit - spent),
                    percentage=float(min(percentage_of(spent, budget.limit), HUNDRED)),
                    is_over_budget=spent > budget.limit,
                )
            )
        return statuses

    def reset_data(self) -> None:
        """Remove every record, adjustment and budget."""
        self.records.clear_records()
        self.adjustments.clear_adjustments()
        if self.budgets is not None:
            self.budgets.clear_budgets()
        logger.warning("[RESET] All records, adjustments and budgets removed")
