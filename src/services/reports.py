"""Report drafts built from enriched transactions.

Totals come from ``summarize_transactions`` over the selected subset, so a
stored report always equals the sum of its lines as the list view shows them.
"""

import json
import secrets
from datetime import UTC, date, datetime
from typing import Literal

from loguru import logger
from pydantic import BaseModel, Field
from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.report import Report
from src.services.enrichment_types import EnrichedTransaction
from src.services.exceptions import InvalidReportError, ReportNotFoundError
from src.services.prices import format_usd
from src.services.summary import summarize_transactions

# Omits O, 0, 1, I
REPORT_ID_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
REPORT_ID_SUFFIX_LEN = 6

ReportTemplate = Literal["STANDARD", "VISA_APPLICATION", "RENTAL_APPLICATION", "LOAN_APPLICATION"]


class ReportDraft(BaseModel):
    title: str | None = Field(None, max_length=255)
    date_from: date
    date_to: date
    template: ReportTemplate = "STANDARD"
    tx_hashes: list[str] | None = None  # None = every transaction in range


def generate_report_id(now: datetime | None = None) -> str:
    """Public report id, ``PV-<year>-<6 chars>``."""
    year = (now or datetime.now(UTC)).year
    suffix = "".join(secrets.choice(REPORT_ID_ALPHABET) for _ in range(REPORT_ID_SUFFIX_LEN))
    return f"PV-{year}-{suffix}"


def format_report_date(day: date) -> str:
    return f"{day.strftime('%B')} {day.day}, {day.year}"


def format_date_range(date_from: date, date_to: date) -> str:
    return f"{format_report_date(date_from)} - {format_report_date(date_to)}"


def _utc_day(ts: datetime) -> date:
    return (ts.astimezone(UTC) if ts.tzinfo else ts).date()


def select_report_transactions(
    transactions: list[EnrichedTransaction],
    date_from: date,
    date_to: date,
    tx_hashes: list[str] | None = None,
) -> list[EnrichedTransaction]:
    """Transactions inside the inclusive UTC date range, optionally by hash."""
    wanted = {h.lower() for h in tx_hashes} if tx_hashes is not None else None
    return [
        tx
        for tx in transactions
        if date_from <= _utc_day(tx.timestamp) <= date_to
        and (wanted is None or tx.tx_hash.lower() in wanted)
    ]


async def create_report(
    session: AsyncSession,
    user_id: str,
    draft: ReportDraft,
    transactions: list[EnrichedTransaction],
) -> Report:
    """Persist a report over the selected subset of ``transactions``.

    Raises InvalidReportError for an inverted range or when a requested
    hash is not among the in-range transactions.
    """
    if draft.date_from > draft.date_to:
        raise InvalidReportError("date_from must not be after date_to")

    selected = select_report_transactions(
        transactions, draft.date_from, draft.date_to, draft.tx_hashes
    )
    if draft.tx_hashes:
        found = {tx.tx_hash.lower() for tx in selected}
        missing = sorted({h.lower() for h in draft.tx_hashes} - found)
        if missing:
            raise InvalidReportError(
                f"Transactions not found in range: {', '.join(missing)}"
            )

    summary = summarize_transactions(selected)

    report = Report(
        report_id=generate_report_id(),
        user_id=user_id,
        title=draft.title or f"Income Report: {format_date_range(draft.date_from, draft.date_to)}",
        date_from=datetime.combine(draft.date_from, datetime.min.time()),
        date_to=datetime.combine(draft.date_to, datetime.min.time()),
        template=draft.template,
        transaction_ids=json.dumps([tx.tx_hash for tx in selected]),
        total_income=summary.total_income,
        total_verified=summary.verified_income,
        transaction_count=summary.total_transactions,
    )
    session.add(report)
    await session.flush()
    await session.refresh(report)  # load server-side created_at

    logger.info(
        f"[REPORT] {report.report_id} for user {user_id}: "
        f"{summary.total_transactions} txs, {format_usd(summary.total_income)} total"
    )
    return report


async def list_reports(session: AsyncSession, user_id: str) -> list[Report]:
    result = await session.execute(
        select(Report).where(Report.user_id == user_id).order_by(desc(Report.created_at))
    )
    return list(result.scalars().all())


async def get_report(session: AsyncSession, user_id: str, report_pk: str) -> Report:
    report = await session.get(Report, report_pk)
    if report is None or report.user_id != user_id:
        raise ReportNotFoundError(f"Report not found: {report_pk}")
    return report
