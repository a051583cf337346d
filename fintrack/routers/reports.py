"""
Reporting endpoints: monthly totals, per-concept totals and CSV export.
"""
from typing import List

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
import structlog

from ..models.financial import ConceptTotal, MonthlyTotals
from ..services.aggregator import FinancialAggregator
from ..services.export import export_filename, transactions_to_csv
from ..services.transaction import TransactionService
from ..utils.constants import DEFAULT_REPORT_MONTHS, DEFAULT_TOP_CONCEPTS
from ..utils.dependencies import (
    CurrentSession,
    Gate,
    get_financial_aggregator,
    get_transaction_service
)

logger = structlog.get_logger()
router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/monthly", response_model=List[MonthlyTotals], summary="Monthly Totals")
async def monthly_report(
    current: CurrentSession,
    gate: Gate,
    months: int = Query(DEFAULT_REPORT_MONTHS, ge=1, le=60),
    aggregator: FinancialAggregator = Depends(get_financial_aggregator)
) -> List[MonthlyTotals]:
    return await aggregator.monthly(gate.scope_for(current), months)


@router.get("/concepts", response_model=List[ConceptTotal], summary="Concept Totals")
async def concept_report(
    current: CurrentSession,
    gate: Gate,
    limit: int = Query(DEFAULT_TOP_CONCEPTS, ge=1, le=100),
    aggregator: FinancialAggregator = Depends(get_financial_aggregator)
) -> List[ConceptTotal]:
    return await aggregator.concepts(gate.scope_for(current), limit)


@router.get("/export.csv", summary="Export Transactions as CSV")
async def export_csv(
    current: CurrentSession,
    gate: Gate,
    transaction_service: TransactionService = Depends(get_transaction_service)
) -> Response:
    """Download the caller's visible transactions as a CSV file."""
    transactions = await transaction_service.list_transactions(gate.scope_for(current))
    filename = export_filename()
    
    logger.info(
        "Transaction report downloaded",
        user_id=current.user.id,
        row_count=len(transactions)
    )
    return Response(
        content=transactions_to_csv(transactions),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )
