from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dreamcatcher.db.database import get_engine
from dreamcatcher.errors import register_exception_handlers
from dreamcatcher.routes import admin, booking
from dreamcatcher.utils.config import get_settings

logging.basicConfig(level=logging.INFO)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # return pooled connections only if a request ever opened the engine
    if get_engine.cache_info().currsize:
        await get_engine().dispose()


app = FastAPI(title="Dreamcatcher API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.frontend_origins,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=True,
)

register_exception_handlers(app)

app.include_router(booking.router, prefix="/api")
app.include_router(admin.router, prefix="/api")


@app.get("/health")
def healthcheck() -> dict[str, str]:
    return {"status": "ok"}
