"""
API routers module.
"""
from carbon_reporting.api.baselines import router as baselines_router
from carbon_reporting.api.emissions import router as emissions_router
from carbon_reporting.api.factors import router as factors_router
from carbon_reporting.api.readings import router as readings_router

__all__ = [
    "baselines_router",
    "emissions_router",
    "factors_router",
    "readings_router",
]
