from fastapi import APIRouter

from maintenance_automation.api.routes import automation, tasks, technicians

api_router = APIRouter()
api_router.include_router(automation.router)
api_router.include_router(tasks.router)
api_router.include_router(technicians.router)
