import logging
import os

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from authentication.router import router as auth_router
from db.deps import get_store
from db.errors import StoreError, StoreUnavailable
from db.session import open_store
from db.tabular_store import TabularStore, ensure_tables
from models.registry import SHEET_SCHEMAS
from routers.admin import router as admin_router
from routers.deals import router as deals_router

# --------------------------------------------------
# LOGGING
# --------------------------------------------------
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"
CORS_ORIGIN = os.getenv("CORS_ORIGIN", "*")


# --------------------------------------------------
# APP
# --------------------------------------------------
app = FastAPI(
    title="Deal Registration API",
    version="1.0.0",
    swagger_ui_parameters={
        "persistAuthorization": True,
        "displayRequestDuration": True,
    },
)
app.state.store = None


# --------------------------------------------------
# STORE INIT
# --------------------------------------------------
@app.on_event("startup")
def _init_store():
    if app.state.store is not None:
        return
    try:
        store = open_store()
        created = ensure_tables(store, SHEET_SCHEMAS)
        if created:
            logger.info("Provisioned sheets: %s", ", ".join(created))
        app.state.store = store
    except StoreError:
        # requests retry through get_store
        logger.exception("Store init failed")


# --------------------------------------------------
# CORS
# --------------------------------------------------
_origins = [o.strip() for o in CORS_ORIGIN.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins or ["*"],
    allow_credentials="*" not in _origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --------------------------------------------------
# ERRORS
# --------------------------------------------------
@app.exception_handler(StoreUnavailable)
def _store_unavailable(request: Request, exc: StoreUnavailable):
    logger.error("Store unavailable on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=503,
        content={"detail": "Data store temporarily unavailable"},
    )


@app.exception_handler(StoreError)
def _store_error(request: Request, exc: StoreError):
    logger.error(
        "Store error on %s %s",
        request.method,
        request.url.path,
        exc_info=(type(exc), exc, exc.__traceback__),
    )
    return JSONResponse(status_code=500, content={"detail": str(exc)})


# --------------------------------------------------
# ROUTERS
# --------------------------------------------------
app.include_router(auth_router, prefix=API_PREFIX)
app.include_router(deals_router, prefix=API_PREFIX)
app.include_router(admin_router, prefix=API_PREFIX)


# --------------------------------------------------
# HEALTH CHECK
# --------------------------------------------------
@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/health/store")
def store_health(store: TabularStore = Depends(get_store)):
    tables = store.list_tables()
    missing = [name for name in SHEET_SCHEMAS if name not in tables]
    return {
        "status": "ok" if not missing else "degraded",
        "tables": tables,
        "missing": missing,
    }


@app.get("/")
def root():
    return {"status": "ok"}
