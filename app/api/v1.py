from fastapi import APIRouter
from app.api.routers import warehouses
from app.api.routers import zones
from app.api.routers import racks
from app.api.routers import shelves
from app.api.routers import inventory
from app.api.routers import logs

api_router = APIRouter()
api_router.include_router(warehouses.router)
api_router.include_router(zones.router)
api_router.include_router(racks.router)
api_router.include_router(shelves.router)
api_router.include_router(inventory.router)
api_router.include_router(logs.router)
