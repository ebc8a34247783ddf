import logging
import time

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from .config import STORE_BACKEND
from .database import SessionLocal, init_db
from .errors import MatchmakingError, StoreUnavailable
from .routes import include_modular_routers

logger = logging.getLogger(__name__)

app = FastAPI(title="Eventra Matchmaking API")
include_modular_routers(app)


@app.exception_handler(MatchmakingError)
def matchmaking_error_handler(request: Request, exc: MatchmakingError) -> JSONResponse:
    headers = {"Retry-After": "1"} if isinstance(exc, StoreUnavailable) else None
    if exc.status_code >= 500:
        logger.warning("[API] %s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)


def wait_for_db(max_attempts: int = 20, delay_seconds: float = 1.5) -> None:
    last_err: Exception | None = None
    for _ in range(max_attempts):
        try:
            with SessionLocal() as db:
                db.execute(text("SELECT 1"))
                db.commit()
            return
        except OperationalError as exc:
            last_err = exc
            time.sleep(delay_seconds)
    if last_err:
        raise last_err


@app.on_event("startup")
def on_startup() -> None:
    if STORE_BACKEND != "sql":
        logger.info("[API] store backend=%s; skipping database setup", STORE_BACKEND)
        return
    wait_for_db()
    init_db()


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
