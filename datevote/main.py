import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from datevote import __version__
from datevote.config import get_settings
from datevote.controllers.events import router as events_router
from datevote.controllers.health import router as health_router
from datevote.controllers.users import router as users_router
from datevote.errors import register_exception_handlers
from datevote.lifespan import cleanup_resources, setup_resources
from datevote.middleware import HTTPLogMiddleware

settings = get_settings()

logging.basicConfig(
    level=settings.log.level,
    format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    resources = await setup_resources()
    try:
        yield
    finally:
        await cleanup_resources(resources)


app = FastAPI(title="datevote", version=__version__, lifespan=lifespan)
register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins,
    allow_origin_regex=settings.cors.origins_regex or None,
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

if settings.debug.request:
    logging.getLogger("datevote.http").setLevel(logging.DEBUG)
    app.add_middleware(HTTPLogMiddleware)

if settings.debug.sql:
    logging.getLogger("psycopg").setLevel(logging.DEBUG)

app.include_router(health_router)
app.include_router(users_router)
app.include_router(events_router)
