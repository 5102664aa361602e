import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .ai_client import AIClient
from .api.routes import ai, auth, dashboard, profile, roadmaps
from .config import settings
from .database import init_db
from .errors import SkillForgeError

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Init DB tables on startup
init_db()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One provider client for the whole process
    app.state.ai_client = AIClient(settings)
    logger.info("[app] started (%s)", settings.APP_ENV)
    yield


app = FastAPI(
    title="SkillForge API",
    description="Career development: resume scoring, learning roadmaps, streaks",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SkillForgeError)
async def skillforge_error_handler(request: Request, exc: SkillForgeError):
    if exc.status_code >= 500:
        logger.warning("%s %s → %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if exc.status_code == 404 and exc.detail == "Not Found":
        message = f"Not Found - {request.url.path}"
    return JSONResponse(status_code=exc.status_code, content={"message": message}, headers=exc.headers)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    body = {"message": str(exc) or "Server Error"}
    if not settings.is_production:
        body["stack"] = "".join(traceback.format_exception(exc))
    return JSONResponse(status_code=500, content=body)


app.include_router(auth.router,      prefix="/api/auth",      tags=["Auth"])
app.include_router(profile.router,   prefix="/api/profile",   tags=["Profile"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"])
app.include_router(roadmaps.router,  prefix="/api/roadmaps",  tags=["Roadmaps"])
app.include_router(ai.router,        prefix="/api",           tags=["AI"])


@app.get("/")
def root():
    return {
        "name": "SkillForge API",
        "version": "0.1.0",
        "status": "running",
        "docs": "/docs",
        "endpoints": {
            "auth":      "/api/auth",
            "profile":   "/api/profile",
            "dashboard": "/api/dashboard",
            "roadmaps":  "/api/roadmaps",
            "ai":        "/api",
        },
    }


@app.get("/health")
def health():
    return {"status": "healthy"}
