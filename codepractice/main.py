from contextlib import asynccontextmanager
from fastapi import FastAPI
from typing import Optional
import logging

from codepractice import auth
from codepractice.config import Settings
from codepractice.db import init_db, make_engine
from codepractice.errors import install_error_handlers
from codepractice.judge.runner import Executor, MockExecutor
from codepractice.routers import execute, questions, stats, submissions

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


def create_app(settings: Optional[Settings] = None, executor: Optional[Executor] = None) -> FastAPI:
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db(app.state.engine)
        logger.info("Database ready at %s", app.state.engine.url.render_as_string(hide_password=True))
        yield
        app.state.engine.dispose()

    app = FastAPI(title="Code Practice API", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = make_engine(settings.database_url)
    app.state.auth_gate = auth.AuthGate(
        secret_key=settings.secret_key,
        algorithm=settings.algorithm,
        access_token_expire_minutes=settings.access_token_expire_minutes,
    )
    app.state.executor = executor or MockExecutor(settings.languages, seed=settings.executor_seed)

    install_error_handlers(app)

    app.include_router(auth.router)
    app.include_router(questions.router)
    app.include_router(submissions.router)
    app.include_router(execute.router)
    app.include_router(stats.router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


def build_app() -> FastAPI:
    """Entry point for ``uvicorn --factory codepractice.main:build_app``."""
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    if settings.secret_key == Settings().secret_key:
        logger.warning("Using the default secret key; set CODEPRACTICE_SECRET_KEY")
    return create_app(settings)
