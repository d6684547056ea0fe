from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.http import health_router, auth_router, users_router
from app.core.config import settings
from app.core.db import init_db
from app.core.errors import register_exception_handlers
from app.core.logging import setup_logging

setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    yield


app = FastAPI(
    title="VideoTube Users",
    description="User accounts, sessions and channel read models for a video-sharing platform",
    version="1.0.0",
    lifespan=lifespan
)

# CORS: cookie-сессии требуют allow_credentials
app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.cors_origin.split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Подключаем роутеры
app.include_router(health_router)
app.include_router(auth_router, prefix=settings.api_prefix)
app.include_router(users_router, prefix=settings.api_prefix)
