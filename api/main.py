from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from admin import router as admin_router
from auth import router as auth_router
from catalog import router as catalog_router
from core import config
from core.db import Database
from core.errors import install_exception_handlers
from core.logs import configure_logging
from uploads import router as uploads_router


def build_database() -> Database:
    return Database(
        config.database_url(),
        min_size=config.db_pool_min_size(),
        max_size=config.db_pool_max_size(),
        command_timeout=config.db_command_timeout(),
    )


def create_app(database: Database | None = None) -> FastAPI:
    configure_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # One pool per process, shared by every request.
        await app.state.db.connect()
        try:
            yield
        finally:
            await app.state.db.close()

    app = FastAPI(title="BeYou API", lifespan=lifespan)
    app.state.db = database if database is not None else build_database()

    # The storefront calls this API from the browser with cookies.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[config.site_url()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_exception_handlers(app)

    app.include_router(auth_router.router, tags=["auth"])
    app.include_router(admin_router.router, tags=["admin"])
    app.include_router(catalog_router.router, tags=["products"])
    app.include_router(uploads_router.router, tags=["images"])
    app.include_router(uploads_router.files_router, tags=["images"])

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()
