"""Main FastAPI application for Insight auth"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from insight_auth import __version__
from insight_auth.api.routes import invites, password, signup, sso
from insight_auth.config import settings
from insight_auth.database.database import Base, engine
from insight_auth.exceptions import InsightAuthError
from insight_auth.log_config import configure_logging
from insight_auth.services.oauth import register_default_providers

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    configure_logging()
    logger.info("insight_auth_starting", app_env=settings.APP_ENV)
    Base.metadata.create_all(bind=engine)
    register_default_providers()
    logger.info("oauth_providers_registered", provider=settings.OAUTH_PROVIDER)

    yield

    logger.info("insight_auth_stopping")


app = FastAPI(
    title="Insight Auth API",
    description="Signup, invites, password reset, sessions and SSO",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(InsightAuthError)
async def insight_auth_error_handler(request: Request, exc: InsightAuthError):
    if exc.is_server_error:
        logger.error(
            "request_failed",
            path=request.url.path,
            error_type=type(exc).__name__,
            error=exc.message,
        )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


app.include_router(signup.router, prefix="/api/v1/signup", tags=["signup"])
app.include_router(password.router, prefix="/api/v1/password", tags=["password"])
app.include_router(sso.router, prefix="/api/v1/sso", tags=["sso"])
app.include_router(invites.router, prefix="/api/v1/org/invites", tags=["invites"])


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "insight-auth"}
