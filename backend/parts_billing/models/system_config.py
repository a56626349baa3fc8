from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime
from parts_billing.db.base import Base


class SystemConfig(Base):
    """系统键值配置（如开票水位线）"""
    __tablename__ = "system_config"

    key = Column(String(100), primary_key=True)
    value = Column(Text)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
