from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from timing_asgi import TimingMiddleware, TimingClient  # type: ignore
from timing_asgi.integrations import StarletteScopeToName  # type: ignore

from orgguard.core import config
from orgguard.core.database.engine import AsyncSessionLocal, init_db
from orgguard.core.errors import PermissionDenied
from orgguard.core.limiter import limiter
from orgguard.features.activity.routes import router as activity_router
from orgguard.features.audit.routes import router as audit_router
from orgguard.features.permissions.catalog import default_catalog, ensure_seeded
from orgguard.features.permissions.routes import router as permission_router
from orgguard.utils import get_logger


log = get_logger(__name__)
log.info("Initializing server")
app = FastAPI(
    title="OrgGuard",
    description="Organization-scoped authorization with activity and audit logging",
    version="0.1.0",
    docs_url="/docs" if config.ENABLE_DOCS else None,
    redoc_url="/redoc" if config.ENABLE_DOCS else None,
    openapi_url="/openapi.json" if config.ENABLE_DOCS else None
)
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)


class PrintTimings(TimingClient):
    def timing(self, metric_name, timing, tags):
        log.debug(dict(route=metric_name.removeprefix("main.orgguard.features."), timing=timing, tags=tags))


app.add_middleware(TimingMiddleware, client=PrintTimings(), metric_namer=StarletteScopeToName("main", app))

if config.ENABLE_DOCS:
    log.warning("Docs enabled")
if config.ALLOW_ORIGIN:
    log.warning("Setting allow origin to %s", config.ALLOW_ORIGIN)
    origins = [config.ALLOW_ORIGIN]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_request: Request, exc: RequestValidationError):
    errors = dict()
    for error in exc.errors():
        if "loc" not in error or "msg" not in error:
            continue
        key = error["loc"][-1]
        if key == "__root__":
            key = "root"
        errors[key] = error["msg"]
    log.info("Request validation error %s", errors)
    return JSONResponse(status_code=400, content=jsonable_encoder(errors))


@app.exception_handler(PermissionDenied)
async def permission_denied_handler(_request: Request, exc: PermissionDenied) -> Response:
    log.info("Permission denied %s.%s", exc.resource, exc.action)
    return JSONResponse({"detail": str(exc)}, status_code=403)


@app.exception_handler(RateLimitExceeded)
def rate_limit_exceeded_handler(_request: Request, _exc: RateLimitExceeded) -> Response:
    return JSONResponse({"error": "You are going too fast"}, status_code=429)


@app.on_event("startup")
async def startup():
    """Initialize database and permission catalog on application startup."""
    log.info("Initializing database...")
    await init_db()
    if config.SEED_ON_STARTUP:
        async with AsyncSessionLocal() as db:
            await ensure_seeded(db, default_catalog())
    log.info("Database initialized successfully")


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


# Permission checks
app.include_router(permission_router, prefix="/permissions", tags=["permissions"])

# Organization log views
app.include_router(activity_router, prefix="/organizations", tags=["activity"])
app.include_router(audit_router, prefix="/organizations", tags=["audit"])
