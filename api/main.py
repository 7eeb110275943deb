import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from achievements import router as achievements_router
from auth import router as auth_router
from core import store
from core.log import setup_logging
from core.responses import install_error_handlers
from projects import router as projects_router
from research import router as research_router
from uploads import router as uploads_router
from uploads import service as uploads_service
from users import router as users_router

DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://localhost:5173"


def cors_origins() -> list[str]:
    raw = os.environ.get("CORS_ORIGINS", "").strip() or DEFAULT_CORS_ORIGINS
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(_: FastAPI):
    setup_logging()
    # Initialize the document store once per process.
    await store.init_store()
    uploads_service.ensure_upload_dirs()
    try:
        yield
    finally:
        await store.close_store()


app = FastAPI(title="Portfolio API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_error_handlers(app)

app.include_router(auth_router.router, tags=["auth"])
app.include_router(users_router.router, tags=["users"])
app.include_router(projects_router.router, tags=["projects"])
app.include_router(achievements_router.router, tags=["achievements"])
app.include_router(research_router.router, tags=["research"])
app.include_router(uploads_router.router, tags=["uploads"])

app.mount(
    "/uploads",
    StaticFiles(directory=uploads_service.upload_root(), check_dir=False),
    name="uploads",
)


@app.get("/health")
def health() -> dict:
    return {"success": True, "message": "API is running"}


@app.get("/")
def root() -> dict:
    return {"success": True, "message": "Portfolio API"}
