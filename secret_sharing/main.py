from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from secret_sharing.config import settings
from secret_sharing.logging_config import setup_logging
from secret_sharing.middleware.logging import LoggingMiddleware
from secret_sharing.middleware.rate_limit import limiter
from secret_sharing.routers import secret_sharing
from secret_sharing.services.exceptions import SecretSharingError

# Database tables are managed by Alembic migrations
# Run: alembic upgrade head

setup_logging()

app = FastAPI(
    title="SecretSharing",
    description="Ephemeral, self-destructing exchange of client-side encrypted secrets",
    version="0.1.0",
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(SecretSharingError)
async def secret_sharing_error_handler(request: Request, exc: SecretSharingError) -> JSONResponse:
    """Render service errors the same way HTTPException would."""
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Request logging with correlation IDs
app.add_middleware(LoggingMiddleware)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(secret_sharing.router, prefix="/api/v1", tags=["secret-sharing"])


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
