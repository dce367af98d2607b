"""
Central API Router
Combines all API endpoints into a single router for main.py
"""
from fastapi import APIRouter

from yieldmap.api import logs
from yieldmap.api.endpoints import spatial_join

# Create the main API router
api_router = APIRouter()

api_router.include_router(spatial_join.router, prefix="/api/spatial-join", tags=["spatial-join"])
api_router.include_router(logs.router)
