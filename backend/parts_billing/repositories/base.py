"""
通用仓储 - 基于 SQLAlchemy 异步会话

每次调用独立开会话并提交：单条记录的更新是原子的，跨记录不做事务。
查询支持字段投影，返回只包含所选字段的字典。
"""

from typing import Any, Dict, Generic, List, Mapping, Optional, Sequence, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import async_sessionmaker

from parts_billing.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class SqlAlchemyRepository(Generic[ModelT]):
    model: Type[ModelT]

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    def _columns(self, fields: Optional[Sequence[str]]):
        if not fields:
            return list(self.model.__table__.columns)
        return [getattr(self.model, field) for field in fields]

    async def find(
        self,
        *criteria,
        fields: Optional[Sequence[str]] = None,
        order_by=None,
    ) -> List[Dict[str, Any]]:
        query = select(*self._columns(fields)).where(*criteria)
        if order_by is not None:
            query = query.order_by(order_by)
        async with self.session_factory() as session:
            result = await session.execute(query)
            return [dict(row) for row in result.mappings().all()]

    async def find_one(
        self,
        *criteria,
        fields: Optional[Sequence[str]] = None,
    ) -> Optional[Dict[str, Any]]:
        query = select(*self._columns(fields)).where(*criteria).limit(1)
        async with self.session_factory() as session:
            result = await session.execute(query)
            row = result.mappings().first()
            return dict(row) if row is not None else None

    async def find_min(self, field: str, *criteria) -> Any:
        """字段最小值，无匹配记录时为 None"""
        query = select(func.min(getattr(self.model, field))).where(*criteria)
        async with self.session_factory() as session:
            result = await session.execute(query)
            return result.scalar()

    async def create(self, values: Mapping[str, Any]) -> Dict[str, Any]:
        """新建记录，返回全部字段（含生成的ID）"""
        obj = self.model(**values)
        async with self.session_factory() as session:
            session.add(obj)
            await session.commit()
            await session.refresh(obj)
            return {column.key: getattr(obj, column.key) for column in self.model.__table__.columns}

    async def update_one(
        self,
        *criteria,
        set_values: Optional[Mapping[str, Any]] = None,
        add_to_set: Optional[Mapping[str, Any]] = None,
    ) -> int:
        """
        更新第一条匹配记录

        Args:
            set_values: 直接赋值的字段
            add_to_set: 集合字段（JSON数组）追加，已存在则不重复

        Returns:
            匹配的记录数（0 或 1）
        """
        async with self.session_factory() as session:
            result = await session.execute(select(self.model).where(*criteria).limit(1))
            obj = result.scalars().first()
            if obj is None:
                return 0

            for field, value in (set_values or {}).items():
                setattr(obj, field, value)

            for field, value in (add_to_set or {}).items():
                current = list(getattr(obj, field) or [])
                if value not in current:
                    # 赋新列表，JSON 列才会被标记为已修改
                    setattr(obj, field, current + [value])

            await session.commit()
            return 1
