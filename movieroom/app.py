from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from tortoise.contrib.fastapi import RegisterTortoise

from .logging import get_logger, setup_logging
from .routers import analytics as analytics_router
from .routers import rooms as rooms_router
from .routers import users as users_router
from .routers import websockets as ws_router
from .settings import settings

setup_logging()
logger = get_logger(__name__)

# -----------------------------
# Lifespan (Tortoise ORM)
# -----------------------------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    if settings.is_prod and settings.JWT_SECRET == "your-super-secret-jwt-key":
        logger.warning("JWT_SECRET is the built-in default; set it in the environment")
    async with RegisterTortoise(
        app,
        db_url=settings.DATABASE_URL,
        modules={"models": ["movieroom.models"]},
        generate_schemas=True,
        add_exception_handlers=True,
        use_tz=True,
    ):
        logger.info("Movie Room server ready | env=%s", settings.ENVIRONMENT)
        yield

# -----------------------------
# FastAPI app instance
# -----------------------------

app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.debug else [settings.CLIENT_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(users_router.router)
app.include_router(rooms_router.router)
app.include_router(analytics_router.router)
app.include_router(ws_router.router)


@app.exception_handler(Exception)
async def unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error: %s %s -> %s", request.method, request.url, exc, exc_info=True)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.get("/api/health", tags=["system"])
async def health():
    return {"status": "ok", "message": "Movie Room API is running"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("movieroom.app:app", host=settings.HOST, port=settings.PORT, reload=settings.debug)

__all__ = ["app"]
