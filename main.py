import logging
import time
from typing import Iterator, Optional

from fastapi import Depends, FastAPI, File, Request, UploadFile, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from aggregations import active_users_per_day, elite_users, logins_per_day, team_insights, top_countries
from config import settings
from evaluation import EvaluationHarness
from exceptions import APIException, BadRequestError, DecodeError, MissingInputError
from logging_config import setup_logging
from schemas import (
    ActiveUsersPerDayResponse,
    EliteUsersResponse,
    EvaluationResponse,
    IngestResponse,
    TeamInsightsResponse,
    TopCountriesResponse,
)
from store import DatasetStore, dataset_store

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="User Insights API", debug=settings.DEBUG)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",")] if settings.CORS_ORIGINS else ["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every request with its status and timing."""
    start_time = time.perf_counter()
    response = await call_next(request)
    process_time = time.perf_counter() - start_time

    logger.info(
        f"{request.method} {request.url.path} - {response.status_code}",
        extra={
            "extra_fields": {
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "process_time_ms": round(process_time * 1000, 2),
            }
        }
    )
    response.headers["X-Process-Time"] = str(process_time)
    return response


@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error_code": exc.error_code},
        headers=exc.headers,
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(
        f"Unhandled exception: {exc}",
        exc_info=True,
        extra={"extra_fields": {"method": request.method, "path": request.url.path}}
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def get_store() -> DatasetStore:
    return dataset_store


def get_evaluation_harness() -> Iterator[EvaluationHarness]:
    with EvaluationHarness(
        base_url=settings.EVALUATION_BASE_URL,
        dataset_path=settings.EVALUATION_DATASET_PATH,
        timeout=settings.EVALUATION_TIMEOUT_S,
    ) as harness:
        yield harness


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _ingest(store: DatasetStore, raw: Optional[bytes], start: float) -> IngestResponse:
    try:
        loaded = store.load_json(raw)
    except MissingInputError as e:
        raise BadRequestError(str(e), error_code="MISSING_INPUT") from e
    except DecodeError as e:
        logger.warning(f"Rejected dataset upload: {e}")
        raise BadRequestError(f"Invalid dataset: {e}", error_code="DECODE_ERROR") from e

    return IngestResponse(message=f"Dataset received: {loaded} users", duration_ms=_elapsed_ms(start))


@app.get("/")
def read_root():
    return {"message": "Backend running", "docs": "/docs"}


@app.get("/health")
def health(store: DatasetStore = Depends(get_store)):
    return {"status": "healthy", "users": len(store)}


@app.post("/users", response_model=IngestResponse)
async def ingest_users_file(
    file: Optional[UploadFile] = File(None),
    store: DatasetStore = Depends(get_store),
):
    start = time.perf_counter()
    content = await file.read() if file is not None else None
    return _ingest(store, content, start)


@app.post("/users/json", response_model=IngestResponse)
async def ingest_users_json(request: Request, store: DatasetStore = Depends(get_store)):
    start = time.perf_counter()
    return _ingest(store, await request.body(), start)


@app.get("/superusers", response_model=EliteUsersResponse)
def get_elite_users(store: DatasetStore = Depends(get_store)):
    start = time.perf_counter()
    users = elite_users(store.snapshot(), settings.ELITE_SCORE_THRESHOLD)
    return EliteUsersResponse(users=users, count=len(users), duration_ms=_elapsed_ms(start))


@app.get("/top-countries", response_model=TopCountriesResponse)
def get_top_countries(store: DatasetStore = Depends(get_store)):
    start = time.perf_counter()
    countries = top_countries(
        store.snapshot(),
        limit=settings.TOP_COUNTRIES_LIMIT,
        threshold=settings.ELITE_SCORE_THRESHOLD,
    )
    return TopCountriesResponse(countries=countries, duration_ms=_elapsed_ms(start))


@app.get("/team-insights", response_model=TeamInsightsResponse)
def get_team_insights(store: DatasetStore = Depends(get_store)):
    start = time.perf_counter()
    teams = team_insights(store.snapshot())
    return TeamInsightsResponse(teams=teams, duration_ms=_elapsed_ms(start))


@app.get("/active-users-per-day", response_model=ActiveUsersPerDayResponse)
def get_active_users_per_day(store: DatasetStore = Depends(get_store)):
    start = time.perf_counter()
    if settings.ACTIVE_DAYS_MODE == "logins":
        days = logins_per_day(store.snapshot())
    else:
        days = active_users_per_day(store.snapshot())
    return ActiveUsersPerDayResponse(days=days, duration_ms=_elapsed_ms(start))


@app.get("/evaluation", response_model=EvaluationResponse)
def run_evaluation(harness: EvaluationHarness = Depends(get_evaluation_harness)):
    return EvaluationResponse(evaluation=harness.run())


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.API_HOST, port=settings.API_PORT)
