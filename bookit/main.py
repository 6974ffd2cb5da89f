from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bookit.core.config import settings
from bookit.core.logging_config import configure_logging
from bookit.db.session import Database, init_db, close_db
from bookit.api.errors import register_exception_handlers
from bookit.api.v1.api import api_router
from bookit.services.booking_service import BookingEngine


@asynccontextmanager
async def lifespan(app: FastAPI):
    # The database handle exists only between startup and shutdown; the engine gets it injected.
    # A handle passed to create_app() belongs to the caller and is left open.
    database = app.state.database
    owns_database = database is None
    if owns_database:
        database = init_db(settings.DATABASE_URL)
        app.state.database = database
    app.state.booking_engine = BookingEngine(database.SessionLocal)
    try:
        yield
    finally:
        app.state.booking_engine = None
        if owns_database:
            app.state.database = None
            close_db()


def create_app(database: Database | None = None) -> FastAPI:
    configure_logging()
    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    app.state.database = database

    # CORS: use CORS_ORIGINS from env in production; default to localhost for dev
    _default_origins = [
        "http://127.0.0.1:5173", "http://localhost:5173",
        "http://127.0.0.1:3000", "http://localhost:3000",
    ]
    _origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()] if settings.CORS_ORIGINS else _default_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(api_router)

    @app.get("/health")
    def health():
        return {"status": "OK", "message": f"{settings.APP_NAME} is running"}

    return app


app = create_app()
