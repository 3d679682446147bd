"""
Quiz API: login/signup, fixed questions, per-section best scores, leaderboard.

Request path: CORS -> origin check, readiness gate (/api/*) -> route -> store.
"""
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from auth_module import login_or_signup
from config import Settings, get_settings
from database import MongoUserStore, UserStore
from errors import QuizError
from models import (
    DEFAULT_SECTION,
    Health,
    LeaderboardEntry,
    LoginRequest,
    ScoreResult,
    SubmitRequest,
    User,
)
from observability import setup_logging
from questions import list_questions
import scoring

logger = logging.getLogger(__name__)

NOT_READY = {"message": "Service unavailable - database not ready"}
INTERNAL_ERROR = {"message": "Internal server error"}
CORS_REJECTED = "CORS policy: This origin is not allowed"


def get_store(request: Request) -> UserStore:
    return request.app.state.store


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def _is_api_path(path: str) -> bool:
    return path == "/api" or path.startswith("/api/")


def create_app(store: Optional[UserStore] = None, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    if store is None:
        store = MongoUserStore(
            settings.mongo_uri,
            db_name=settings.mongo_db_name,
            timeout_ms=settings.mongo_timeout_ms,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.log_level, settings.log_format)
        await app.state.store.connect()
        logger.info("Quiz API started")
        yield
        await app.state.store.close()
        logger.info("Quiz API shutting down")

    app = FastAPI(title="Quiz API", version="1.0.0", lifespan=lifespan)
    app.state.store = store
    app.state.settings = settings

    allowed_origins = set(settings.cors_origins)

    # Registered before CORS so CORS wraps it: 503s and 500s keep their CORS headers
    @app.middleware("http")
    async def gateway(request: Request, call_next):
        origin = request.headers.get("origin")
        if origin is not None and origin not in allowed_origins:
            logger.warning(f"Rejected origin {origin}", extra={"path": request.url.path})
            return PlainTextResponse(CORS_REJECTED, status_code=status.HTTP_403_FORBIDDEN)
        if _is_api_path(request.url.path) and not request.app.state.store.is_connected():
            return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=NOT_READY)
        try:
            return await call_next(request)
        except Exception as exc:
            logger.error(
                f"Unhandled exception on {request.url.path}: {exc}",
                exc_info=True,
                extra={"path": request.url.path},
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=INTERNAL_ERROR,
            )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    _register_error_handlers(app)
    _register_routes(app)
    return app


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(QuizError)
    async def quiz_error_handler(request: Request, exc: QuizError):
        level = logging.ERROR if exc.http_status >= 500 else logging.WARNING
        logger.log(
            level,
            f"{exc.code} on {request.url.path}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "message": "Invalid request data",
                "details": [
                    {
                        "field": ".".join(str(loc) for loc in e["loc"]),
                        "message": e["msg"],
                        "type": e["type"],
                    }
                    for e in exc.errors()
                ],
            },
        )


def _register_routes(app: FastAPI) -> None:
    @app.post("/api/login", response_model=User)
    async def login(body: LoginRequest, store: UserStore = Depends(get_store)):
        return await login_or_signup(store, body.username, body.password)

    @app.get("/api/questions")
    async def questions(reveal: Optional[str] = None):
        # Only the literal "true" reveals answers (practice mode)
        return list_questions(reveal=reveal == "true")

    @app.post("/api/submit", response_model=ScoreResult)
    async def submit(
        body: SubmitRequest,
        store: UserStore = Depends(get_store),
        settings: Settings = Depends(get_app_settings),
    ):
        best = await scoring.submit(store, body, trust_client_score=settings.trust_client_score)
        return ScoreResult(score=best)

    @app.get("/api/leaderboard", response_model=List[LeaderboardEntry])
    async def leaderboard(section: Optional[str] = None, store: UserStore = Depends(get_store)):
        rows = await store.list_scores()
        return scoring.build_leaderboard(rows, section or DEFAULT_SECTION)

    @app.get("/health", response_model=Health)
    async def health(store: UserStore = Depends(get_store)):
        return Health(db="connected" if store.is_connected() else "disconnected")


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)
