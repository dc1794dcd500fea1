"""API routes."""

from payroll_processor.api.routes.health import router as health_router
from payroll_processor.api.routes.payroll_runs import router as payroll_runs_router
from payroll_processor.api.routes.payslips import router as payslips_router
from payroll_processor.api.routes.salary_components import router as salary_components_router
from payroll_processor.api.routes.salary_structures import router as salary_structures_router

__all__ = [
    "health_router",
    "payroll_runs_router",
    "payslips_router",
    "salary_components_router",
    "salary_structures_router",
]
