import logging

from fastapi import FastAPI

from streamline.config import settings
import streamline.db.models  # noqa: F401
from streamline.api.auth.routes import router as auth_router
from streamline.api.organizations.routes import router as organizations_router
from streamline.api.organizations.routes import invitations_router

from streamline.api.board.project.routes import router as project_router
from streamline.api.board.task.routes import router as task_router
from streamline.api.board.label.routes import router as label_router
from streamline.api.board.comment.routes import router as comment_router

# Scheduler for invitation / session housekeeping
from contextlib import asynccontextmanager
from streamline.core.scheduler import start_scheduler, stop_scheduler

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.SCHEDULER_ENABLED:
        start_scheduler()
    yield
    stop_scheduler()

app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# Routers
app.include_router(auth_router, prefix="/auth", tags=["Auth"])
app.include_router(organizations_router, prefix="/organizations", tags=["Organizations"])
app.include_router(invitations_router, prefix="/invitations", tags=["Invitations"])

app.include_router(project_router, prefix="/projects", tags=["Projects"])
app.include_router(task_router, prefix="/tasks", tags=["Tasks"])
app.include_router(label_router, prefix="/labels", tags=["Labels"])
app.include_router(comment_router, prefix="/comments", tags=["Comments"])

@app.get("/ping")
def ping():
    return {"message": "pong"}
