# captionhub/main.py
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from captionhub.api.api import api_router
from captionhub.core.config import settings
from captionhub.core.logging import logger
from captionhub.db.init_db import setup_database
from captionhub.db.session import SessionLocal

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json"
)

if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
    start_time = time.time()
    with logger.contextualize(request_id=request_id):
        response = await call_next(request)
        process_time = time.time() - start_time
        logger.bind(status_code=response.status_code, duration_s=round(process_time, 3)).info(
            f"{request.method} {request.url.path}"
        )
    response.headers["X-Request-ID"] = request_id
    return response


@app.get("/")
async def root():
    return {"message": f"Welcome to the {settings.PROJECT_NAME}"}


@app.get("/health")
def health_check():
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        logger.error(f"Health check could not reach the database: {str(e)}")
        database = "unavailable"
    finally:
        db.close()
    return {"status": "healthy" if database == "ok" else "degraded", "database": database}


setup_database()
app.include_router(api_router, prefix=settings.API_V1_STR)

if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting {settings.PROJECT_NAME} in development mode")
    uvicorn.run("captionhub.main:app", host="0.0.0.0", port=8000, reload=True)
