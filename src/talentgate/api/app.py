from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from talentgate.api.admin_routes import router as admin_router
from talentgate.api.routes import router as api_router
from talentgate.config import get_settings
from talentgate.core.uploads import UPLOAD_URL_PREFIX
from talentgate.db.init import ensure_data_directories, init_database
from talentgate.logging_config import configure_logging


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging()
    ensure_data_directories()

    app = FastAPI(title=settings.app_name)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    def _startup() -> None:
        init_database()

    @app.get("/health")
    def health() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    app.include_router(api_router)
    app.include_router(admin_router)
    app.mount(UPLOAD_URL_PREFIX, StaticFiles(directory=str(settings.upload_dir)), name="uploads")
    return app
