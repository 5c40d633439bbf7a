"""Report export endpoints."""

import io
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from celengan.dependencies import get_current_user, get_db
from celengan.models.transaction import TransactionType
from celengan.models.user import User
from celengan.services.report_export_service import XLSX_MEDIA_TYPE, report_export_service
from celengan.services.savings_target_service import savings_target_service
from celengan.services.transaction_service import transaction_service
from celengan.utils.datetime_utils import utc_now

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/export")
async def export_report(
    type: Optional[TransactionType] = None,
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1900, le=2100),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Download an Excel workbook with transactions, savings targets and a summary.

    The filters narrow the Transactions sheet and the summary totals; every
    savings target is always listed.
    """
    transactions = await transaction_service.get_transactions(
        db=db, user=current_user, type=type, month=month, year=year
    )
    targets = await savings_target_service.get_targets(db=db, user=current_user)

    content = report_export_service.build_workbook(
        transactions, targets, report_export_service.summarize(transactions, targets)
    )
    filename = report_export_service.build_filename(utc_now())
    logger.info(f"Exported report for user {current_user.id}: {len(transactions)} transactions")

    return StreamingResponse(
        io.BytesIO(content),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
