import logging

logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from planner.config import get_settings
from planner.controllers.auth import router as auth_router
from planner.controllers.events import router as events_router
from planner.controllers.health import router as health_router
from planner.errors import register_exception_handlers
from planner.lifespan import lifespan
from planner.middleware import HTTPLogMiddleware


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Rehearsal Planner API", version="1.0.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins,
        allow_origin_regex=settings.cors.origins_regex or None,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if settings.debug.request:
        logging.getLogger("planner.http").setLevel(logging.DEBUG)
        app.add_middleware(HTTPLogMiddleware)

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(events_router)
    return app


app = create_app()
