"""FastAPI application for the Contract Resource Reconstruction API."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routes import router
from sow_ledger import __version__
from sow_ledger.config import load_settings
from sow_ledger.logging_config import configure_logging, get_logger
from sow_ledger.models import LedgerValidationError

settings = load_settings()
configure_logging(level=settings.log_level_value)
logger = get_logger("api")

app = FastAPI(
    title="Contract Resource Reconstruction API",
    description="Engineers and billing in effect for a contract, rebuilt from baseline + approved change requests.",
    version=__version__,
)

# CORS: set ALLOWED_ORIGINS="*" to allow any origin
if settings.allow_all_origins:
    ALLOWED_ORIGINS: list[str] = ["*"]
elif settings.allowed_origins:
    ALLOWED_ORIGINS = settings.allowed_origins
else:
    ALLOWED_ORIGINS = [
        "http://localhost:8080",
        "http://localhost:3000",
        "http://127.0.0.1:8080",
    ]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=not settings.allow_all_origins,  # credentials not allowed with wildcard
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["*"],
    max_age=3600,
)

app.include_router(router)


@app.get("/")
async def root():
    return {
        "name": "Contract Resource Reconstruction API",
        "version": __version__,
        "docs": "/docs",
        "health": "/api/v1/health",
    }


@app.exception_handler(LedgerValidationError)
async def ledger_validation_error(request: Request, exc: LedgerValidationError):
    """Ledger failures raised outside a route (e.g. loading the ledger file)."""
    raw_id = request.path_params.get("contract_id")
    logger.error(
        "ledger_validation_failed",
        extra={"path": request.url.path, "errors": exc.errors},
    )
    return JSONResponse(content={
        "success": False,
        "contract_id": int(raw_id) if raw_id is not None and str(raw_id).isdigit() else None,
        "error_type": "validation_error",
        "errors": exc.errors,
    })
