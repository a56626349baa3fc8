from datetime import datetime
import logging

from pydantic import Field, validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    PROJECT_NAME: str = "配件订单开票服务"
    API_STR: str = "/api"

    # 数据库配置
    SQLITE_DATABASE_URI: str = "sqlite:///./parts_billing.db"

    # 日志配置
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    # 开票定时任务配置
    INVOICE_JOB_ENABLED: bool = True  # 是否启用每日开票
    INVOICE_SCHEDULE_TIME: str = Field(
        default="00:00",
        description="每日开票时间，格式 HH:MM"
    )
    INVOICE_RUN_ON_START: bool = True  # 启动时立即执行一次
    # 尚无成功运行记录时的回溯起点
    INVOICE_INITIAL_WATERMARK: datetime = datetime(2021, 4, 1)

    # 金额精度（小数位）
    CURRENCY_PRECISION: int = 2

    @validator("INVOICE_SCHEDULE_TIME")
    def check_schedule_time(cls, v: str) -> str:
        hour, _, minute = v.partition(":")
        if not (hour.isdigit() and minute.isdigit()):
            raise ValueError(v)
        if not (0 <= int(hour) <= 23 and 0 <= int(minute) <= 59):
            raise ValueError(v)
        return v

    class Config:
        case_sensitive = True
        env_file = ".env"


settings = Settings()
logger.info(f"加载配置: DB={settings.SQLITE_DATABASE_URI}, 开票时间={settings.INVOICE_SCHEDULE_TIME}")
