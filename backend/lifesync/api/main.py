from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from lifesync.core.config import settings
from lifesync.core.errors import ExecutionFailure, LifeSyncError, ProcessingFailure
from lifesync.api.dependencies import close_dialogue_manager
from lifesync.api.routes import agent, records
import logging

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Backend API for the LifeSync personal assistant",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Server errors never leak their detail outside development
GENERIC_SERVER_MESSAGES = {
    ProcessingFailure: "Failed to process message",
    ExecutionFailure: "Failed to execute action",
}


@app.exception_handler(LifeSyncError)
async def lifesync_error_handler(request: Request, exc: LifeSyncError):
    message = exc.message
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
        message = GENERIC_SERVER_MESSAGES.get(type(exc), "Internal server error")

    content = {"success": False, "message": message}
    if settings.is_development and exc.status_code >= 500:
        content["error"] = str(exc)
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0]["msg"] if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"success": False, "message": message})


app.include_router(agent.router, prefix="/api/agent", tags=["Agent"])
app.include_router(records.tasks, prefix="/api/tasks", tags=["Tasks"])
app.include_router(records.calendar, prefix="/api/calendar", tags=["Calendar"])
app.include_router(records.goals, prefix="/api/goals", tags=["Goals"])
app.include_router(records.mood, prefix="/api/mood", tags=["Mood"])


@app.on_event("startup")
async def startup():
    try:
        from lifesync.core.database import connect_mongodb

        await connect_mongodb()
        logger.info("MongoDB connected on startup")
    except Exception as e:
        logger.warning(f"Startup DB init skipped: {e}")


@app.on_event("shutdown")
async def shutdown():
    await close_dialogue_manager()
    try:
        from lifesync.core.database import close_mongodb

        await close_mongodb()
        logger.info("MongoDB connection closed")
    except Exception as e:
        logger.warning(f"MongoDB close failed: {e}")


@app.get("/health")
async def health_check():
    return {"status": "ok", "version": settings.VERSION}


@app.get("/")
async def root():
    return {"message": "Welcome to LifeSync API"}
