import logging
from contextlib import asynccontextmanager
from typing import List

from fastapi import FastAPI, Depends, Path, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

import schemas
from config import Settings, configure_logging, get_settings
from database import create_tables, get_db
from errors import UnauthorizedError, register_error_handlers
from models import User
from repository import TaskRepository, UserRepository
from security import TokenService
from tasks import TaskService
from users import UserDirectory

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

# tasks.id is a 32-bit INTEGER on postgres and mysql
MAX_TASK_ID = 2**31 - 1


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    create_tables()
    logger.info("Task tracker ready")
    yield


# Initialize app
app = FastAPI(title="Task Tracker", lifespan=lifespan)
register_error_handlers(app)

_cors_origins = list(get_settings().cors_origins)
if _cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# Wiring: the services get plain objects, only this layer knows about Depends
def get_token_service(settings: Settings = Depends(get_settings)) -> TokenService:
    return TokenService(settings)


def get_user_directory(db: Session = Depends(get_db)) -> UserDirectory:
    return UserDirectory(UserRepository(db))


def get_task_service(db: Session = Depends(get_db)) -> TaskService:
    return TaskService(TaskRepository(db))


# Get current user
def get_current_user(
    token: str = Depends(oauth2_scheme),
    tokens: TokenService = Depends(get_token_service),
    users: UserDirectory = Depends(get_user_directory),
) -> User:
    return tokens.verify(token, users)


@app.post("/auth/signup", status_code=status.HTTP_201_CREATED, response_model=schemas.UserOut)
def sign_up(
    credentials: schemas.AuthCredentials,
    users: UserDirectory = Depends(get_user_directory),
):
    return users.sign_up(credentials.username, credentials.password)


@app.post(
    "/auth/login",
    response_model=schemas.Token,
    response_description="The bearer token is in `access_token`",
)
def login(
    credentials: schemas.AuthCredentials,
    users: UserDirectory = Depends(get_user_directory),
    tokens: TokenService = Depends(get_token_service),
):
    username = users.validate_credentials(credentials.username, credentials.password)
    if username is None:
        logger.info("Failed login for %s", credentials.username)
        raise UnauthorizedError("Invalid credentials")

    return schemas.Token(access_token=tokens.issue(username))


@app.get("/tasks", response_model=List[schemas.TaskOut])
def get_tasks(
    filters: schemas.TaskFilter = Depends(),
    service: TaskService = Depends(get_task_service),
    user: User = Depends(get_current_user),
):
    return service.list(filters, user)


@app.get("/tasks/{task_id}", response_model=schemas.TaskOut)
def get_task(
    task_id: int = Path(..., ge=1, le=MAX_TASK_ID),
    service: TaskService = Depends(get_task_service),
    user: User = Depends(get_current_user),
):
    return service.get_by_id(task_id, user)


@app.post("/tasks", status_code=status.HTTP_201_CREATED, response_model=schemas.TaskOut)
def create_task(
    task: schemas.TaskCreate,
    service: TaskService = Depends(get_task_service),
    user: User = Depends(get_current_user),
):
    return service.create(task.title, task.description, user)


@app.patch("/tasks/{task_id}/status", response_model=schemas.TaskOut)
def update_task_status(
    update: schemas.TaskStatusUpdate,
    task_id: int = Path(..., ge=1, le=MAX_TASK_ID),
    service: TaskService = Depends(get_task_service),
    user: User = Depends(get_current_user),
):
    return service.update_status(task_id, update.status, user)


@app.delete("/tasks/{task_id}", response_model=schemas.Message)
def delete_task(
    task_id: int = Path(..., ge=1, le=MAX_TASK_ID),
    service: TaskService = Depends(get_task_service),
    user: User = Depends(get_current_user),
):
    service.delete(task_id, user)
    return {"message": "Task deleted successfully"}
