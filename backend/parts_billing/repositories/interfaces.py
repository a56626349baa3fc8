"""
仓储接口

生产实现（SQLAlchemy）和测试替身都继承这些接口。
查询方法返回字典，只包含 fields 指定的字段。
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence


class OrderRepository(ABC):

    @abstractmethod
    async def find_by_id(self, order_id: int, fields: Sequence[str]) -> Optional[Dict[str, Any]]:
        """订单不存在时返回 None"""

    @abstractmethod
    async def add_invoice(self, order_id: int, invoice_id: int) -> None:
        """invoice_ids 追加发票ID（已存在则忽略）"""


class InvoiceRepository(ABC):

    @abstractmethod
    async def find_by_order(self, order_id: int, fields: Sequence[str]) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    async def create(self, values: Mapping[str, Any]) -> Dict[str, Any]:
        """新建发票，返回含生成ID的全部字段"""


class LineItemRepository(ABC):

    @abstractmethod
    async def find_unbilled(self, since: datetime) -> List[Dict[str, Any]]:
        """返回可开票配件，字段包含 id/order_id/item_class/created_at 和价格字段"""

    @abstractmethod
    async def find_earliest_unbilled(self, since: datetime) -> Optional[datetime]:
        """since 之后创建、尚未开票（不论是否已完成）的最早创建时间"""

    @abstractmethod
    async def stamp_invoice(self, item_id: int, invoice_id: int) -> None:
        pass


class WatermarkStore(ABC):

    @abstractmethod
    async def get_watermark(self) -> Optional[datetime]:
        pass

    @abstractmethod
    async def set_watermark(self, value: datetime) -> None:
        pass
