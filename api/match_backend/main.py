import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from . import database
from .config import LOG_LEVEL
from .errors import MatchBackendError
from .routes import include_modular_routers

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="Match Backend API")
include_modular_routers(app)

ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(MatchBackendError)
def handle_domain_error(request: Request, exc: MatchBackendError) -> JSONResponse:
    logger.info("[api] %s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.__class__.__name__)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


def wait_for_db(max_attempts: int = 20, delay_seconds: float = 1.5) -> None:
    last_err: Exception | None = None
    for _ in range(max_attempts):
        try:
            with database.SessionLocal() as db:
                db.execute(text("SELECT 1"))
                db.commit()
            return
        except OperationalError as exc:
            last_err = exc
            logger.warning("[startup] database not ready: %s", exc)
            time.sleep(delay_seconds)
    if last_err:
        raise last_err


@app.on_event("startup")
def on_startup() -> None:
    wait_for_db()
    database.init_db()


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
