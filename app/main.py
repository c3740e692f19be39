import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from app.api import admin as admin_api
from app.api import auth as auth_api
from app.api import comments as comments_api
from app.api import posts as posts_api
from app.api import upload as upload_api
from app.api import user as user_api
from app.config import settings
from app.database import AsyncSessionLocal, create_tables
from app.logging_config import setup_logging
from app.services.bootstrap import bootstrap
from app.storage.oss import LOCAL_URL_PREFIX

setup_logging()
logger = logging.getLogger("devconnect.app")

app = FastAPI(title="DevConnect API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_api.router, prefix="/api/auth", tags=["auth"])
app.include_router(user_api.router, prefix="/api/user", tags=["user"])
app.include_router(posts_api.router, prefix="/api/posts", tags=["posts"])
app.include_router(comments_api.router, prefix="/api", tags=["comments"])
app.include_router(admin_api.router, prefix="/api/admin", tags=["admin"])
app.include_router(upload_api.router, prefix="/api", tags=["upload"])

os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount(LOCAL_URL_PREFIX, StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": str(exc) or "An error occurred"})


@app.on_event("startup")
async def startup():
    await create_tables()
    async with AsyncSessionLocal() as session:
        await bootstrap(session)
    logger.info("DevConnect API ready on %s:%s", settings.HOST, settings.PORT)


@app.get("/")
async def root():
    return {"message": "Welcome to the DevConnect API"}
