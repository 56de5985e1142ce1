from contextlib import asynccontextmanager
from typing import Callable

from fastapi import FastAPI

from api.routes import router
from storage.context import AppContext, init_adapter
from utils.log_setup import setup_logging


def create_app(context_factory: Callable[[], AppContext] = init_adapter) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging()
        # Startup failures propagate and keep the server from coming up.
        app.state.context = context_factory()
        try:
            yield
        finally:
            app.state.context.close()

    app = FastAPI(
        title="Forum Storage",
        version="0.1.0",
        description="Storage bootstrap and schema status for the forum backend",
        lifespan=lifespan,
    )
    app.include_router(router)
    return app


app = create_app()
