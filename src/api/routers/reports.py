"""Report endpoints: list, create from enriched transactions, detail."""

import json
from datetime import UTC, datetime, time
from typing import Any

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.app import limiter
from src.api.dependencies import get_current_user, get_engine, get_session
from src.models.report import Report
from src.services.reports import ReportDraft, create_report, get_report, list_reports
from src.services.transactions import EnrichmentEngine

router = APIRouter(prefix="/api/v1/reports", tags=["reports"])


def _report_to_dict(report: Report) -> dict[str, Any]:
    d: dict[str, Any] = {}
    for c in report.__table__.columns:
        val = getattr(report, c.name)
        if hasattr(val, "isoformat"):
            val = val.isoformat()
        d[c.name] = val
    d["transaction_ids"] = json.loads(report.transaction_ids or "[]")
    return d


@router.get("")
async def get_reports(
    session: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user),
) -> dict[str, Any]:
    reports = await list_reports(session, user_id)
    return {"reports": [_report_to_dict(r) for r in reports]}


@router.post("")
@limiter.limit("10/minute")
async def post_report(
    request: Request,
    body: ReportDraft,
    session: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user),
    engine: EnrichmentEngine = Depends(get_engine),
) -> dict[str, Any]:
    """Build a report from the user's enriched transactions in the date range.

    Each wallet's history is walked back to ``date_from`` so the report is
    not limited to the cached first page.
    """
    since = datetime.combine(body.date_from, time.min, tzinfo=UTC)
    transactions = await engine.get_all_user_transactions(user_id, since=since)
    report = await create_report(session, user_id, body, transactions)
    await session.commit()
    return {"report": _report_to_dict(report), "message": "Report created successfully"}


@router.get("/{report_pk}")
async def get_report_detail(
    report_pk: str,
    session: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user),
) -> dict[str, Any]:
    report = await get_report(session, user_id, report_pk)
    return {"report": _report_to_dict(report)}
