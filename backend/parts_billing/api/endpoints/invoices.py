"""发票管理API"""

from typing import Any, List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from parts_billing.core.config import settings
from parts_billing.core.deps import get_db, get_session_factory
from parts_billing.models.invoice import Invoice
from parts_billing.schemas.invoice import InvoiceResponse, InvoiceRunReport
from parts_billing.services.scheduler import get_scheduler_status, trigger_invoice_run_now

router = APIRouter()


@router.get("/", response_model=List[InvoiceResponse])
async def list_invoices(
    *,
    db: AsyncSession = Depends(get_db),
    order_id: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200)) -> Any:
    """获取发票列表"""
    query = select(Invoice)
    if order_id:
        query = query.where(Invoice.order_id == order_id)
    query = query.order_by(Invoice.id.desc()).offset((page - 1) * limit).limit(limit)

    result = await db.execute(query)
    return result.scalars().all()


@router.post("/run", response_model=InvoiceRunReport)
async def run_invoices(
    *,
    session_factory: async_sessionmaker = Depends(get_session_factory)
) -> Any:
    """立即执行一次开票"""
    return await trigger_invoice_run_now(session_factory)


@router.get("/scheduler/status")
async def get_invoice_scheduler_status() -> Any:
    """获取开票调度器状态"""
    return {
        "invoice_job": {
            "enabled": settings.INVOICE_JOB_ENABLED,
            "schedule": f"每天 {settings.INVOICE_SCHEDULE_TIME}",
            "run_on_start": settings.INVOICE_RUN_ON_START,
        },
        "scheduler": get_scheduler_status()
    }


@router.get("/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(
    *,
    db: AsyncSession = Depends(get_db),
    invoice_id: int) -> Any:
    """获取发票详情"""
    invoice = await db.get(Invoice, invoice_id)
    if not invoice:
        raise HTTPException(status_code=404, detail="发票不存在")
    return invoice
