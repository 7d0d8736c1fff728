"""Company read endpoints: summary tiles, project trees and company detail."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pipevault.core.response import DataResponse
from pipevault.db.base import get_db
from pipevault.schemas.common import error_responses
from pipevault.schemas.company import CompanyDetail, CompanySummary
from pipevault.services.aggregation import AggregationService

router = APIRouter(prefix="/companies", tags=["Companies"])


@router.get("/summaries", response_model=DataResponse[list[CompanySummary]])
async def list_company_summaries(session: AsyncSession = Depends(get_db)):
    """Per-company counts for the dashboard tiles, ordered by name."""
    summaries = await AggregationService(session).list_company_summaries()
    return {"data": summaries}


@router.get("/projects", response_model=DataResponse[list[CompanyDetail]])
async def list_project_summaries(session: AsyncSession = Depends(get_db)):
    """Every active company with its full project tree."""
    trees = await AggregationService(session).list_project_summaries()
    return {"data": trees}


@router.get(
    "/{company_id}",
    response_model=DataResponse[CompanyDetail],
    responses=error_responses(404, 503),
)
async def get_company_detail(company_id: str, session: AsyncSession = Depends(get_db)):
    detail = await AggregationService(session).get_company_detail(company_id)
    return {"data": detail}
