import asyncio
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from parts_billing.db.base import Base

# 导入所有模型，确保表能被创建
from parts_billing.models import (  # noqa: F401
    Order, OrderPart, Part, Invoice, SystemConfig
)


async def ensure_tables_exist(bind: Optional[AsyncEngine] = None) -> None:
    """
    确保数据库表存在（应用启动时调用）
    """
    if bind is None:
        from parts_billing.db.session import engine
        bind = engine
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


if __name__ == "__main__":
    asyncio.run(ensure_tables_exist())
