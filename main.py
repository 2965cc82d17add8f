from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
import logging

from api.functions import FUNCTION_PATHS, router as functions_router
from api.v1.api_router import api_router
from core.config import settings
from core.database import create_tables
from core.exceptions import register_exception_handlers
from core.middleware import SelectiveCORSMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_tables()
    logger.info(f"{settings.APP_NAME} started")
    yield
    logger.info(f"{settings.APP_NAME} stopped")


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title=settings.APP_NAME,
        description="Projects, contributions, magazine submissions and member notifications",
        version="1.0.0",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    # The remote procedures answer CORS themselves
    app.add_middleware(
        SelectiveCORSMiddleware,
        exempt_paths=FUNCTION_PATHS,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(api_router, prefix="/api/v1")
    app.include_router(functions_router, tags=["Functions"])

    # Uploaded avatars and submission files, served at the URLs FileStorage hands out
    mount_path = settings.PUBLIC_STORAGE_URL.rstrip("/")
    if mount_path.startswith("/"):
        storage_dir = Path(settings.FILE_STORAGE_PATH)
        storage_dir.mkdir(parents=True, exist_ok=True)
        app.mount(
            mount_path,
            StaticFiles(directory=storage_dir),
            name="storage",
        )

    # ✅ health check
    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "version": "1.0.0"}

    return app


app = create_app()
