"""
Income/expense aggregation over the transactions a caller may see.
"""
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Tuple

import structlog

from ..infrastructure.stores import TransactionStore, UserStore
from ..models.financial import (
    ConceptTotal,
    FinancialSummary,
    FormattedSummary,
    MonthlyTotals,
    SummaryResponse,
    Transaction,
    TransactionType,
)
from ..utils.constants import DEFAULT_REPORT_MONTHS, DEFAULT_TOP_CONCEPTS
from .authorization import AccessScope, Scope

logger = structlog.get_logger()

ZERO = Decimal("0")


def summarize(transactions: Iterable[Transaction]) -> FinancialSummary:
    """Sum incomes and expenses; balance is income minus expenses.

    Decimal addition keeps the result independent of ordering.
    """
    income = ZERO
    expenses = ZERO
    for transaction in transactions:
        if transaction.type == TransactionType.INCOME:
            income += transaction.amount
        else:
            expenses += transaction.amount
    
    return FinancialSummary(income=income, expenses=expenses, balance=income - expenses)


def format_amount(value) -> str:
    """Render a monetary value as ``$ 1.234.567`` with no fraction digits.

    Rounding is for display only.
    """
    amount = Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    grouped = f"{abs(int(amount)):,}".replace(",", ".")
    sign = "-" if amount < 0 else ""
    return f"{sign}$ {grouped}"


def monthly_breakdown(
    transactions: Iterable[Transaction],
    months: int = DEFAULT_REPORT_MONTHS
) -> List[MonthlyTotals]:
    """Per-month totals keyed ``M/YYYY``, oldest first, last ``months`` only."""
    buckets: Dict[Tuple[int, int], MonthlyTotals] = {}
    for transaction in transactions:
        key = (transaction.date.year, transaction.date.month)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = MonthlyTotals(month=f"{key[1]}/{key[0]}")
        if transaction.type == TransactionType.INCOME:
            bucket.income += transaction.amount
        else:
            bucket.expenses += transaction.amount
    
    ordered = [buckets[key] for key in sorted(buckets)]
    return ordered[-months:] if months > 0 else []


def concept_breakdown(
    transactions: Iterable[Transaction],
    limit: int = DEFAULT_TOP_CONCEPTS
) -> List[ConceptTotal]:
    """Totals per (type, concept), largest first."""
    totals: Dict[Tuple[TransactionType, str], Decimal] = {}
    for transaction in transactions:
        key = (transaction.type, transaction.concept)
        totals[key] = totals.get(key, ZERO) + transaction.amount
    
    labels = {TransactionType.INCOME: "Income", TransactionType.EXPENSE: "Expense"}
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return [
        ConceptTotal(name=f"{labels[kind]}: {concept}", value=value, type=kind)
        for (kind, concept), value in ranked[:limit]
    ]


class FinancialAggregator:
    """Scoped fetch followed by an in-memory reduction.

    A failed fetch raises; it is never reported as an empty, zero-balance set.
    """
    
    def __init__(self, transactions: TransactionStore, users: UserStore):
        self.transactions = transactions
        self.users = users
    
    async def visible_transactions(self, scope: AccessScope) -> List[Transaction]:
        return await self.transactions.find_many(user_id=scope.owner_id)
    
    async def summary(self, scope: AccessScope) -> SummaryResponse:
        transactions = await self.visible_transactions(scope)
        totals = summarize(transactions)
        
        if scope.scope == Scope.ALL and scope.owner_id is None:
            total_users = await self.users.count()
        else:
            total_users = 1
        
        logger.info(
            "Summary calculated",
            viewer_id=scope.viewer_id,
            scope=scope.scope.value,
            owner_id=scope.owner_id,
            transaction_count=len(transactions),
            balance=str(totals.balance)
        )
        
        return SummaryResponse(
            income=totals.income,
            expenses=totals.expenses,
            balance=totals.balance,
            total_users=total_users,
            transaction_count=len(transactions),
            formatted=FormattedSummary(
                income=format_amount(totals.income),
                expenses=format_amount(totals.expenses),
                balance=format_amount(totals.balance)
            )
        )
    
    async def monthly(self, scope: AccessScope, months: int = DEFAULT_REPORT_MONTHS) -> List[MonthlyTotals]:
        return monthly_breakdown(await self.visible_transactions(scope), months)
    
    async def concepts(self, scope: AccessScope, limit: int = DEFAULT_TOP_CONCEPTS) -> List[ConceptTotal]:
        return concept_breakdown(await self.visible_transactions(scope), limit)
