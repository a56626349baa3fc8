"""依赖注入"""
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from parts_billing.db import session as db_session


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    获取数据库会话依赖
    """
    async with db_session.SessionLocal() as session:
        yield session


def get_session_factory() -> async_sessionmaker:
    """获取会话工厂（开票任务每次仓储调用独立开会话）"""
    return db_session.SessionLocal
