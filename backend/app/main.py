"""FastAPI application."""

from fastapi import FastAPI

from backend.app.api.routes.courses import router as courses_router
from backend.app.api.routes.environment import router as environment_router
from backend.app.api.routes.health import router as health_router
from backend.app.api.routes.metrics import router as metrics_router
from backend.app.api.routes.templates import router as templates_router

app = FastAPI(title="Learning Catalog API", version="0.1.0")

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(environment_router, tags=["environment"])
app.include_router(courses_router, tags=["courses"])
app.include_router(templates_router, tags=["templates"])


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Learning Catalog API", "version": "0.1.0"}
