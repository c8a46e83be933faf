"""FastAPI application serving scenario-solver attempts."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from scenario_solver import templates
from scenario_solver.config import get_default_pass_ratio, get_log_level
from scenarios import router as scenarios_router

logger = logging.getLogger(__name__)

logging.basicConfig(
    level=get_log_level(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: report loaded scenarios and fail fast on a bad pass ratio."""
    pass_ratio = get_default_pass_ratio()
    count = len(templates.get_all_summaries())
    logger.info(f"Loaded {count} scenario templates (default pass ratio {pass_ratio})")
    yield


app = FastAPI(title="Scenario Solver", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(scenarios_router, prefix="/api/scenarios", tags=["scenarios"])


@app.get("/health")
def health():
    """Health check for the deployment platform and frontend."""
    return {
        "status": "healthy",
        "scenarios": len(templates.get_all_summaries()),
    }
