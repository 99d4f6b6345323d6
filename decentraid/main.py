"""
DecentraID FastAPI Main Application
Entry point for the off-chain identity custody service.
"""

import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from decentraid import __version__
from decentraid.config import Config, config
from decentraid.errors import DecentraIDError, ValidationError
from decentraid.routes import identity, verification, credentials, audit
from decentraid.services import build_services

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Configure root logging for the service."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def create_app(app_config: Config = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        app_config: Configuration to run with, defaults to the environment
    """
    app_config = app_config or config

    app = FastAPI(
        title="DecentraID Identity Custody Service",
        description="Encrypted off-chain identities with selective disclosure to verifiers",
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc"
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(identity.router, prefix="/api", tags=["Identity"])
    app.include_router(verification.router, prefix="/api", tags=["Verification"])
    app.include_router(credentials.router, prefix="/api", tags=["Credentials"])
    app.include_router(audit.router, prefix="/api", tags=["Audit"])

    @app.exception_handler(DecentraIDError)
    async def decentraid_error_handler(request: Request, exc: DecentraIDError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.code} {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.to_dict()}
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        fields = ", ".join(".".join(str(p) for p in err["loc"][1:]) for err in exc.errors())
        error = ValidationError(f"Invalid or missing fields: {fields}")
        return JSONResponse(
            status_code=error.status_code,
            content={"success": False, "error": error.to_dict()}
        )

    @app.on_event("startup")
    def startup_event():
        """Validate configuration and wire services on startup."""
        configure_logging(app_config.API_LOG_LEVEL)
        app.state.services = build_services(app_config)
        logger.info(f"DecentraID services ready ({app_config.ENVIRONMENT})")

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": "DecentraID Identity Custody Service",
            "version": __version__
        }

    @app.get("/api/config")
    async def public_config():
        """Public contract addresses for clients."""
        return {
            "did_registry_address": app_config.DID_REGISTRY_ADDRESS,
            "verification_log_address": app_config.VERIFICATION_LOG_ADDRESS
        }

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "decentraid.main:app",
        host=config.API_HOST,
        port=config.API_PORT,
        log_level=config.API_LOG_LEVEL
    )
