import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI

from parts_billing.api.api import api_router
from parts_billing.core.config import settings
from parts_billing.core.logging_config import setup_logging
from parts_billing.services.scheduler import init_scheduler, shutdown_scheduler
from parts_billing.db.init_db import ensure_tables_exist

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    # 启动时
    setup_logging(settings.LOG_LEVEL, settings.LOG_DIR)
    logger.info("🚀 应用启动中...")

    await ensure_tables_exist()
    logger.info("📊 数据库表已就绪")

    init_scheduler()
    yield
    # 关闭时
    logger.info("🛑 应用关闭中...")
    shutdown_scheduler()

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_STR}/openapi.json",
    description="配件订单每日开票",
    lifespan=lifespan
)

logger.info(f"注册API路由，前缀: {settings.API_STR}")
app.include_router(api_router, prefix=settings.API_STR)


@app.get("/")
async def root():
    return {"message": settings.PROJECT_NAME}


@app.get("/health")
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000, log_level="info")
