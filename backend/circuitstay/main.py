import logging
import os
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from circuitstay.config import settings
from circuitstay.errors import PlanningError

# ─── Logging setup (file + console) ───
_LOG_DIR = Path(__file__).resolve().parent.parent / "logs"
_LOG_DIR.mkdir(exist_ok=True)

_log_level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)

logging.basicConfig(
    level=_log_level,
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=[
        logging.StreamHandler(),
        RotatingFileHandler(
            _LOG_DIR / "circuitstay.log",
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        ),
    ],
)

# Quiet noisy libraries
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

from circuitstay.routers import circuits, homestays, itineraries

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Seed a demo catalogue if the DB is empty (dev convenience)
    if settings.seed_on_startup:
        try:
            from circuitstay.seed import seed
            await seed()
        except Exception as e:
            logger.warning(f"Auto-seed skipped: {e}")

    yield

    from circuitstay.database import engine
    await engine.dispose()
    logger.info("Database engine disposed")


app = FastAPI(
    title="CircuitStay",
    description="Circuits, homestays and itinerary planning",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PlanningError)
async def planning_error_handler(request: Request, exc: PlanningError):
    logger.warning(f"{request.method} {request.url.path} -> {exc.status_code} {exc.kind}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_detail()})


app.include_router(circuits.router, prefix="/api/circuits", tags=["circuits"])
app.include_router(homestays.router, prefix="/api/homestays", tags=["homestays"])
app.include_router(itineraries.router, prefix="/api/itineraries", tags=["itineraries"])


@app.get("/api/health")
async def health_check():
    return {"status": "ok", "service": "circuitstay"}
