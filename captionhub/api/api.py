# captionhub/api/api.py
from fastapi import APIRouter

from captionhub.api.endpoints.datasets import router as datasets_router
from captionhub.api.endpoints.images import router as images_router

api_router = APIRouter()

api_router.include_router(datasets_router, prefix="/datasets", tags=["datasets"])
api_router.include_router(images_router, prefix="/datasets", tags=["images"])
