# The module provides the FastAPI application serving the Asuna panel assistant.
# Author: Asuna maintainers
# Date: 2026-10-18
# Version: 0.1.0

from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI

from asuna.api.v1.api import api_router
from asuna.core.config import get_settings
from asuna.core.runtime import Runtime, build_runtime
from asuna.utils.logger import console


def create_app(runtime_factory: Optional[Callable[[], Runtime]] = None) -> FastAPI:
    """
    Builds the application. The runtime (gateway, reasoning engine, tools,
    provisioning pool) is created at startup and closed at shutdown, which
    also cancels any provisioning monitor still running.
    """
    factory = runtime_factory or (lambda: build_runtime(get_settings()))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.runtime = factory()
        console.success("Asuna is ready.")
        try:
            yield
        finally:
            await app.state.runtime.aclose()
            console.info("Asuna shut down.")

    app = FastAPI(
        title="Asuna",
        version="0.1.0",
        description="Natural-language assistant for a Pterodactyl game-server panel.",
        lifespan=lifespan,
    )

    @app.get("/", summary="Health Check", tags=["Status"])
    def read_root():
        """Root endpoint to check if the service is alive."""
        console.info("Health check endpoint was hit.")
        return {"message": "Asuna is alive and running!"}

    # Include the v1 router with a global '/v1' prefix
    app.include_router(api_router, prefix="/v1")
    return app


app = create_app()
