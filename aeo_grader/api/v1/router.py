from fastapi import APIRouter

from aeo_grader.api.v1.grader import router as grader_router

api_v1_router = APIRouter(prefix="/api/v1")
api_v1_router.include_router(grader_router)
