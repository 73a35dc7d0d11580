import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app import database
from app.config import settings
from app.exceptions import ErrorKind, PostServiceError
from app.logging_config import configure_logging
from app.middleware import RequestLogMiddleware
from app.routers import posts
from app.schemas import HealthResponse

logger = logging.getLogger(__name__)

# Service error kind -> (HTTP status, envelope status)
_ERROR_STATUS: dict[ErrorKind, tuple[int, str]] = {
    ErrorKind.CONFLICT: (409, "fail"),
    ErrorKind.NOT_FOUND: (404, "fail"),
    ErrorKind.FORBIDDEN: (403, "fail"),
    ErrorKind.INTERNAL: (502, "error"),
}

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    configure_logging()
    logger.info("Post service starting (env=%s)", settings.APP_ENV)
    yield
    # Shutdown
    await database.engine.dispose()
    logger.info("Post service stopped")

app = FastAPI(
    title="Post Service",
    description="JWT-protected CRUD API for blog posts",
    version="1.0.0",
    lifespan=lifespan,
)

# Middleware
app.add_middleware(RequestLogMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Error mapping
@app.exception_handler(PostServiceError)
async def post_service_error_handler(request: Request, exc: PostServiceError):
    status_code, envelope_status = _ERROR_STATUS[exc.kind]
    if exc.kind is ErrorKind.INTERNAL:
        logger.error(
            "%s %s failed: %s",
            request.method,
            request.url.path,
            exc,
            exc_info=exc.cause,
        )
    return JSONResponse(
        status_code=status_code,
        content={"status": envelope_status, "message": exc.message},
    )

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": "fail", "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )

# Routers
app.include_router(posts.router)

@app.get("/api/healthchecker", response_model=HealthResponse)
async def health():
    return HealthResponse(message="Post service is up and running")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.SERVER_PORT)
