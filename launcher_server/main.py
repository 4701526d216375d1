# launcher_server/main.py

import logging
import sys
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from launcher_server.api import auth, games, admin, library, downloads, files
from launcher_server.core import config
from launcher_server.core.errors import register_exception_handlers
from launcher_server.core.utils import storage_dir
from launcher_server.database import init_db, seed_catalog, SessionLocal


logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(title="MLX Launcher API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(auth.router)
    app.include_router(games.router)
    app.include_router(library.router)
    app.include_router(downloads.router)
    app.include_router(files.router)

    if config.ENABLE_ADMIN_ROUTES:
        app.include_router(admin.router)
    if config.ENABLE_UPLOADS:
        app.include_router(admin.upload_router)

    return app


def prepare_storage():
    init_db()
    storage_dir()
    if config.SEED_CATALOG:
        db = SessionLocal()
        try:
            seed_catalog(db)
        finally:
            db.close()


prepare_storage()

app = create_app()


def serve():
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.info("MLX Launcher server on http://localhost:%d", config.PORT)
    logger.info("Games storage: %s", storage_dir().resolve())
    logger.info("Health check: http://localhost:%d/api/health", config.PORT)

    try:
        uvicorn.run(app, host=config.HOST, port=config.PORT, log_level=config.LOG_LEVEL.lower())
    except OSError as e:
        logger.critical("Cannot start server on port %d: %s", config.PORT, e)
        sys.exit(1)


if __name__ == "__main__":
    serve()
