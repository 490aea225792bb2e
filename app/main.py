# app/main.py

from contextlib import asynccontextmanager
from fastapi import FastAPI
from api.routes import default, likes, users
from api.exception_handlers import register_exception_handlers
from infrastructure.postgres_connection import postgres_connection
from config.settings import settings
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events"""
    await postgres_connection.connect()
    logger.info(f"{settings.APP_NAME} started")

    yield

    await postgres_connection.disconnect()


def create_app() -> FastAPI:
    """Build the FastAPI application with all routers and handlers"""
    application = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

    # Register domain exception handlers
    register_exception_handlers(application)

    application.include_router(default.router)
    application.include_router(users.users_router, prefix="/v1")
    application.include_router(users.login_router, prefix="/v1")
    application.include_router(likes.likes_router, prefix="/v1")
    application.include_router(likes.post_likes_router, prefix="/v1")

    return application


app = create_app()
