"""Main entrypoint for the dialog simulation engine API.

Sets up the FastAPI application, middleware, and routes. Serves the
auto-generated OpenAPI/Swagger UI at `/docs` and Redoc at `/redoc`.

Example:
    Run the API server using uvicorn:

        uvicorn dialog_simulation_engine.api.main:app --reload

Notes/Assumptions:
    - CORS is wide-open by default for dev convenience; lock it down in prod.
    - The `app` object is created at import time so uvicorn can discover it.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dialog_simulation_engine.api.routers import sessions
from dialog_simulation_engine.api.settings import settings


def create_app() -> FastAPI:
    """Create and configure the FastAPI app.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    app = FastAPI(
        title="Dialog Simulation Engine API",
        version="0.1.0",
        description="Branching dialog simulations for investigation training",
    )

    # In production, set DIALOG_API_CORS_ALLOW_ALL=false and add allowlist logic.
    if settings.cors_allow_all:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(sessions.router, prefix="/v1", tags=["sessions"])
    return app


app = create_app()
