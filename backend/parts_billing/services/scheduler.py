"""
定时任务调度器服务
使用 APScheduler 每天定时执行开票
"""

import logging
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional, Union

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from parts_billing.core.config import settings
from parts_billing.db import session as db_session
from parts_billing.schemas.invoice import InvoiceRunReport
from parts_billing.services.create_invoice import build_create_invoice_service

logger = logging.getLogger(__name__)

INVOICE_JOB_ID = "create_invoices"

# 全局调度器实例
scheduler: Optional[AsyncIOScheduler] = None

Handler = Callable[[], Union[Awaitable[Any], Any]]


def parse_time_spec(time_spec: str) -> tuple:
    """解析 HH:MM"""
    hour, _, minute = time_spec.partition(":")
    return int(hour), int(minute or 0)


def schedule_daily(
    time_spec: str,
    handler: Handler,
    run_immediately: bool = False,
    job_id: Optional[str] = None,
    name: Optional[str] = None,
):
    """
    注册每日定时任务

    Args:
        time_spec: 每天执行时间，如 "00:00"
        handler: 无参任务函数（支持协程函数）
        run_immediately: 注册后立即执行一次
    """
    global scheduler
    if scheduler is None:
        scheduler = AsyncIOScheduler()

    hour, minute = parse_time_spec(time_spec)
    options = {}
    if run_immediately:
        options["next_run_time"] = datetime.now()

    return scheduler.add_job(
        handler,
        trigger=CronTrigger(hour=hour, minute=minute),
        id=job_id,
        name=name,
        replace_existing=job_id is not None,
        coalesce=True,
        **options
    )


async def run_invoice_job(session_factory=None) -> InvoiceRunReport:
    """执行开票任务"""
    service = build_create_invoice_service(session_factory or db_session.SessionLocal)
    report = await service.create()
    if report.status != "success":
        logger.error(f"❌ 开票任务失败: {report.message}")
    return report


def init_scheduler():
    """初始化并启动调度器"""
    if not settings.INVOICE_JOB_ENABLED:
        logger.info("🧾 每日开票已禁用")
        return

    schedule_daily(
        settings.INVOICE_SCHEDULE_TIME,
        run_invoice_job,
        run_immediately=settings.INVOICE_RUN_ON_START,
        job_id=INVOICE_JOB_ID,
        name="每日开票",
    )

    scheduler.start()
    logger.info(f"⏰ 定时任务调度器已启动 - 开票时间: 每天 {settings.INVOICE_SCHEDULE_TIME}")


def shutdown_scheduler():
    """关闭调度器"""
    global scheduler
    if scheduler:
        if scheduler.running:
            scheduler.shutdown()
        scheduler = None
        logger.info("⏰ 定时任务调度器已关闭")


def get_scheduler_status() -> dict:
    """获取调度器状态"""
    if not scheduler:
        return {
            "enabled": settings.INVOICE_JOB_ENABLED,
            "running": False,
            "jobs": []
        }

    jobs = []
    for job in scheduler.get_jobs():
        # 调度器启动前的待定任务还没有 next_run_time
        next_run_time = getattr(job, "next_run_time", None)
        jobs.append({
            "id": job.id,
            "name": job.name,
            "next_run_time": next_run_time.isoformat() if next_run_time else None
        })

    return {
        "enabled": settings.INVOICE_JOB_ENABLED,
        "running": scheduler.running,
        "jobs": jobs
    }


async def trigger_invoice_run_now(session_factory=None) -> InvoiceRunReport:
    """立即执行一次开票（手动触发）"""
    logger.info("🧾 手动触发开票")
    return await run_invoice_job(session_factory)
