from fastapi import APIRouter

from jsontools.api.routes import tools, utils

api_router = APIRouter()
api_router.include_router(utils.router)
api_router.include_router(tools.router)
