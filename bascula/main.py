"""
main.py

This is the main entry point of the FastAPI application.
Here we create the FastAPI app and register all API routes.

This file does NOT contain business logic.
It only wires everything together.
"""

import logging

from fastapi import FastAPI

# Import API routers
from bascula.api.analyze import router as analyze_router
from bascula.api.corrections import router as corrections_router
from bascula.api.feedback import router as feedback_router
from bascula.api.health import router as health_router
from bascula.api.records import router as records_router


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)


def create_app() -> FastAPI:
    """
    Creates and returns the FastAPI application instance.
    This function helps keep the app creation clean and testable.
    """
    app = FastAPI(
        title="Guaicaramo Báscula Service",
        description="Reads weighing forms from photos, corrects the totals and stores them",
        version="1.0.0"
    )

    # Register API routes
    app.include_router(health_router, prefix="/health", tags=["Health"])
    app.include_router(analyze_router, prefix="/analyze-image", tags=["Analysis"])
    app.include_router(corrections_router, prefix="/corrections", tags=["Corrections"])
    app.include_router(records_router, prefix="/send-to-database", tags=["Records"])
    app.include_router(feedback_router, prefix="/training-feedback", tags=["Training"])

    return app


# Create the FastAPI app instance
app = create_app()
