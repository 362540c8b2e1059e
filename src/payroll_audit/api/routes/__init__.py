"""API routes."""

from payroll_audit.api.routes.employees import router as employees_router
from payroll_audit.api.routes.health import router as health_router
from payroll_audit.api.routes.payroll import router as payroll_router
from payroll_audit.api.routes.rules import router as rules_router

__all__ = ["employees_router", "health_router", "payroll_router", "rules_router"]
