"""
Main API router that includes all route modules.
"""
from fastapi import APIRouter
from tripsettle.api.routes import settlements, finance, loads

api_router = APIRouter()

# Include all route modules
api_router.include_router(settlements.router)
api_router.include_router(finance.router)
api_router.include_router(loads.router)
