"""
Financial summary endpoint.
"""
from fastapi import APIRouter, Depends

from ..models.financial import SummaryResponse
from ..services.aggregator import FinancialAggregator
from ..utils.dependencies import CurrentSession, Gate, get_financial_aggregator

router = APIRouter(tags=["summary"])


@router.get(
    "/summary",
    response_model=SummaryResponse,
    summary="Financial Summary",
    description="Income, expenses and balance over the caller's visible transactions."
)
async def get_summary(
    current: CurrentSession,
    gate: Gate,
    aggregator: FinancialAggregator = Depends(get_financial_aggregator)
) -> SummaryResponse:
    return await aggregator.summary(gate.scope_for(current))
