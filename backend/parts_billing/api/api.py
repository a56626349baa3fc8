"""API 路由聚合"""
from fastapi import APIRouter

from parts_billing.api.endpoints import invoices

api_router = APIRouter()

api_router.include_router(invoices.router, prefix="/invoices", tags=["发票管理"])
