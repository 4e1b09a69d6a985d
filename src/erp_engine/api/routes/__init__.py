"""API routes."""

from erp_engine.api.routes.health import router as health_router
from erp_engine.api.routes.journal import router as journal_router
from erp_engine.api.routes.payroll import router as payroll_router

__all__ = ["health_router", "journal_router", "payroll_router"]
