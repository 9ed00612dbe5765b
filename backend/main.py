# backend/main.py
# Run with: uvicorn main:create_app --factory
import logging
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import ArgumentError

from config import Settings
from database import init_db, make_engine, make_session_factory
from routes.admin import router as admin_router
from routes.users import router as users_router
from utils.errors import register_exception_handlers
from utils.throttle import LoginThrottle

load_dotenv()

logger = logging.getLogger(__name__)

ALLOWED_HEADERS = ["Origin", "X-Requested-With", "Content", "Accept", "Content-Type", "Authorization"]
ALLOWED_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="User Accounts API", version="1.0.0")

    # Process-wide resources, resolved once and read by the dependencies.
    # A malformed DATABASE_URL or a missing driver is a configuration error and
    # stops startup; an unreachable store only fails requests.
    try:
        engine = make_engine(settings.DATABASE_URL, timeout=settings.STORE_TIMEOUT_SECONDS)
    except (ArgumentError, ImportError):
        logger.exception("Invalid DATABASE_URL or missing database driver")
        raise
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)
    app.state.login_throttle = LoginThrottle(settings.LOGIN_MAX_ATTEMPTS, settings.LOGIN_WINDOW_SECONDS)

    # Requests fail individually when the store is down at startup
    init_db(engine)

    # CORS Configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=ALLOWED_METHODS,
        allow_headers=ALLOWED_HEADERS,
    )

    register_exception_handlers(app)

    # Register routers
    app.include_router(users_router)
    app.include_router(admin_router)

    @app.get("/")
    def read_root():
        return {"message": "User Accounts API is running"}

    logger.info("User Accounts API configured with store %s", engine.url.render_as_string(hide_password=True))
    return app
