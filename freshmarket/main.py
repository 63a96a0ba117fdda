import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text

from freshmarket.api import admins, orders, products, retailers
from freshmarket.auth.security import CredentialService
from freshmarket.core.config import Settings, get_settings
from freshmarket.core.errors import register_error_handlers
from freshmarket.core.logging import configure_logging
from freshmarket.db.init import init_db
from freshmarket.db.session import Database
from freshmarket.services.notifications import OrderMailer
from freshmarket.services.uploads import UPLOAD_URL_PREFIX, UploadStore

log = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, *, database: Optional[Database] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    database = database or Database(settings.database_url)
    uploads = UploadStore(settings.upload_dir)
    uploads.ensure()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db(database)
        log.info("%s started on port %s", settings.app_name, settings.port)
        yield
        database.dispose()
        log.info("%s stopped", settings.app_name)

    app = FastAPI(
        title="freshmarket",
        description="Backend API for the Fresh Produce Platform",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.database = database
    app.state.credentials = CredentialService(
        secret_key=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expire_minutes=settings.access_token_expire_minutes,
        bcrypt_rounds=settings.bcrypt_rounds,
    )
    app.state.mailer = OrderMailer.from_settings(settings)
    app.state.uploads = uploads

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        log.info("%s %s %s %.1fms", request.method, request.url.path, response.status_code, elapsed_ms)
        return response

    register_error_handlers(app)

    # Include routers
    prefix = settings.api_prefix
    app.include_router(admins.router, prefix=f"{prefix}/admins", tags=["admins"])
    app.include_router(retailers.router, prefix=f"{prefix}/retailers", tags=["retailers"])
    app.include_router(products.router, prefix=f"{prefix}/products", tags=["products"])
    app.include_router(orders.router, prefix=f"{prefix}/orders", tags=["orders"])

    app.mount(UPLOAD_URL_PREFIX, StaticFiles(directory=settings.upload_dir), name="uploads")

    @app.get("/")
    def read_root():
        return {"message": "Welcome to Fresh Produce Platform"}

    @app.get("/health")
    def health():
        try:
            with database.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            db_status = "connected"
        except Exception as e:
            log.error("Health check could not reach the database: %s", e)
            db_status = "unavailable"
        return {
            "status": "healthy" if db_status == "connected" else "degraded",
            "database": db_status,
            "version": app.version,
        }

    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_level=settings.log_level.lower())
