import logging
import os  # For reading PORT
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn  # For running programmatically
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from recordstore.api import admin, auth, cart, records, reports, users
from recordstore.core.config import Settings, settings as default_settings
from recordstore.services import user_service
from recordstore.services.database import Database

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("recordstore")
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    database: Database = app.state.database
    await database.create_all()
    logger.info("Database tables checked/created successfully")

    async with database.session() as session:
        await user_service.ensure_admin_user(session, app.state.settings)

    yield

    await database.dispose()
    logger.info("Database connections closed")


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    Build the API. The storage handle is created here (or passed in, e.g. by
    tests) and lives on ``app.state`` for the lifetime of the process.
    """
    settings = settings or default_settings
    app = FastAPI(title="Record Store API", lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database or Database(settings.DATABASE_URL, echo=settings.SQL_ECHO)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Malformed request bodies and paths are client errors like any other validation failure
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.info(f"Rejected {request.method} {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=400,
            content={"detail": "Invalid request"}
        )

    # Anything unexpected becomes a generic 500; the details only go to the log
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"}
        )

    # Include routes
    app.include_router(auth.router, prefix="/api", tags=["Authentication"])
    app.include_router(users.router, prefix="/api", tags=["Profile"])
    app.include_router(records.router, prefix="/api", tags=["Records"])
    app.include_router(cart.router, prefix="/api", tags=["Cart"])
    app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])
    app.include_router(reports.router, prefix="/api/admin/reports", tags=["Reports"])

    @app.get("/")
    async def root():
        return {"message": "Welcome to the Record Store API"}

    return app


app = create_app()


if __name__ == "__main__":
    port = int(os.environ.get("BACKEND_PORT", os.environ.get("PORT", 8080)))
    uvicorn.run("main:app", host="0.0.0.0", port=port, log_level="info")
