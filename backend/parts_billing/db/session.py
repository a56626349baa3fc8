import os
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from parts_billing.core.config import settings


def async_database_uri(uri: str) -> str:
    """同步 sqlite 地址转换为 aiosqlite 地址"""
    if uri.startswith("sqlite:///"):
        return uri.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    return uri


def build_engine(uri: str) -> AsyncEngine:
    # 仅在开发环境打印SQL（通过环境变量控制）
    return create_async_engine(
        async_database_uri(uri),
        echo=os.getenv("SQL_DEBUG", "false").lower() == "true",
        future=True,
    )


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=bind,
        autoflush=False,
        expire_on_commit=False,
    )


# 创建异步引擎
engine = build_engine(settings.SQLITE_DATABASE_URI)

# 创建异步会话
SessionLocal = build_session_factory(engine)
