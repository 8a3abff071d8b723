import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlmodel import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

# Import local modules
from . import accounts, tasks
from .config import Settings, load_settings
from .database import build_engine, create_db_and_tables, get_session
from .errors import TaskManagerError
from .models import Credentials, TaskCreate, TaskPayload, TaskRead, UserRead

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


# --- 1. TASK ROUTES ---
@router.get("/tasks", response_model=List[TaskRead])
def list_tasks(user_id: Optional[int] = None, session: Session = Depends(get_session)):
    return tasks.list_tasks(session, user_id)


@router.get("/tasks/{task_id}", response_model=TaskRead)
def get_task(task_id: int, session: Session = Depends(get_session)):
    return tasks.get_task(session, task_id)


@router.post("/tasks", response_model=TaskRead, status_code=201)
def create_task(payload: TaskCreate, session: Session = Depends(get_session)):
    return tasks.create_task(
        session,
        owner_id=payload.user_id,
        title=payload.title,
        description=payload.description,
        status=payload.status,
        due_date=payload.due_date,
    )


@router.put("/tasks/{task_id}", response_model=TaskRead)
def update_task(task_id: int, payload: TaskPayload, session: Session = Depends(get_session)):
    # Full replace: the client re-sends every field, including on status changes
    return tasks.update_task(
        session,
        task_id,
        title=payload.title,
        description=payload.description,
        status=payload.status,
        due_date=payload.due_date,
    )


@router.delete("/tasks/{task_id}")
def delete_task(task_id: int, session: Session = Depends(get_session)):
    return tasks.delete_task(session, task_id)


# --- 2. AUTH ROUTES ---
@router.post("/register", response_model=UserRead, status_code=201)
def register(credentials: Credentials, session: Session = Depends(get_session)):
    return accounts.register(session, credentials.username, credentials.password)


@router.post("/login", response_model=UserRead)
def login(credentials: Credentials, session: Session = Depends(get_session)):
    return accounts.login(session, credentials.username, credentials.password)


@router.get("/health")
def health():
    return {"status": "ok"}


# --- 3. ERROR BODIES ---
def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def handle_task_manager_error(request: Request, exc: TaskManagerError):
    return _error(exc.status_code, exc.message)


async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if not errors:
        return _error(400, "Invalid request")
    first = errors[0]
    if first.get("type") == "json_invalid":
        return _error(400, "Request body is not valid JSON")
    # A task id that does not parse names no task
    if any(e.get("loc", ())[:1] == ("path",) for e in errors):
        return _error(404, "Task not found")
    field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path"))
    message = first.get("msg", "Invalid value")
    return _error(400, f"{field}: {message}" if field else message)


async def handle_http_exception(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail))


# --- 4. APP FACTORY ---
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or load_settings()

    app = FastAPI(title="Student Task Manager", version="1.0.0")
    app.state.settings = settings
    app.state.engine = build_engine(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(TaskManagerError, handle_task_manager_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)

    app.include_router(router)

    @app.on_event("startup")
    def on_startup():
        create_db_and_tables(app.state.engine)

    @app.on_event("shutdown")
    def on_shutdown():
        app.state.engine.dispose()

    return app


def serve():
    """Console entry point: run the API under uvicorn."""
    import uvicorn

    from .logging_setup import setup_logging

    settings = load_settings()
    setup_logging(settings.log_level)
    logger.info("Server running on %s:%s", settings.host, settings.port)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    serve()
