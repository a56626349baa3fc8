from parts_billing.repositories.sql import (
    SqlInvoiceRepository,
    SqlOrderPartRepository,
    SqlOrderRepository,
    SqlRequestPartRepository,
    SqlWatermarkStore,
)

__all__ = [
    "SqlInvoiceRepository",
    "SqlOrderPartRepository",
    "SqlOrderRepository",
    "SqlRequestPartRepository",
    "SqlWatermarkStore",
]
