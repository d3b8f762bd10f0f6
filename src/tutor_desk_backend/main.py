'''
Application entrypoint: lifespan, middleware, error mapping and routers.
'''
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError

from .database.engine import create_db_engine_and_session_factory, dispose_db_engine
from .common.exceptions import InvalidLessonTransitionError, StorageError, CascadeDeleteError
from .common.logger import log
from .common.config import settings
from .api import (
    auth, users, profile, students, lessons, payments, schedule,
    resources, notifications, reports, exports, settings as settings_api, app_state
)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Handles application startup and shutdown events.
    """
    # --- On App Startup ---
    log.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}...")
    create_db_engine_and_session_factory()

    yield # --- Application is now running ---

    # --- On App Shutdown ---
    if not settings.TEST_MODE:
        log.info("Application lifespan shutdown...")
        await dispose_db_engine()
    else:
        log.info("Skipping database engine disposal in TEST_MODE.")


# ---- CREATING THE APP ----
app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    lifespan=lifespan
)

# --- Add CORS Middleware ---
origins = [
    # Local frontend
    "http://localhost",
    "http://localhost:3000",
    "http://localhost:5173",
]

# Extend with environment-specific origins
origins.extend(settings.BACKEND_CORS_ORIGINS)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],)
# --- End of CORS Middleware ---


# --- Exception Handlers ---

@app.exception_handler(InvalidLessonTransitionError)
async def invalid_transition_handler(request: Request, exc: InvalidLessonTransitionError):
    log.warning(f"Rejected lesson transition on {request.url.path}: {exc}")
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})

@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    log.error(f"Storage failure on {request.url.path}: {exc} (status={exc.status_code})")
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": "The file storage service is unavailable. Please try again."}
    )

@app.exception_handler(CascadeDeleteError)
async def cascade_delete_handler(request: Request, exc: CascadeDeleteError):
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": str(exc)})

@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    log.error(f"Database failure on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Could not reach the database. Please check your connection and try again."}
    )

@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    log.warning(f"Rejected invalid input on {request.url.path}: {exc}")
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content={"detail": str(exc)})


@app.get("/")
async def health_check():
    return {"status": "ok", "message": f"{settings.APP_NAME} is running"}

app.include_router(auth.router)
app.include_router(users.router)
app.include_router(profile.router)
app.include_router(students.router)
app.include_router(lessons.router)
app.include_router(payments.router)
app.include_router(schedule.router)
app.include_router(resources.router)
app.include_router(notifications.router)
app.include_router(reports.router)
app.include_router(exports.router)
app.include_router(settings_api.router)
app.include_router(app_state.router)
