# backoffice/main.py
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from backoffice.api.routers import carts, categories, health, integrations, menu, orders, products
from backoffice.data.database import init_db
from backoffice.domain.errors import BackofficeError
from backoffice.utils.logging import get_logger
from backoffice.utils.settings import UPLOADS_DIR, UPLOADS_URL

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Database tables ready")
    yield


async def backoffice_error_handler(request: Request, exc: BackofficeError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def create_app(init_database: bool = True) -> FastAPI:
    app = FastAPI(
        title="Backoffice",
        version="1.0.0",
        lifespan=lifespan if init_database else None,
    )

    app.add_exception_handler(BackofficeError, backoffice_error_handler)

    app.include_router(health.router)
    app.include_router(categories.router)
    app.include_router(menu.router)
    app.include_router(products.router)
    app.include_router(carts.router)
    app.include_router(orders.router)
    app.include_router(integrations.router)

    # wgrane obrazki serwowane pod tym samym prefiksem, który trafia do bazy
    app.mount(UPLOADS_URL, StaticFiles(directory=UPLOADS_DIR, check_dir=False), name="uploads")

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
