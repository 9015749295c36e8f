"""Detected environment endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends

from backend.app.api.tenant import get_detection
from backend.app.models.catalog import EnvironmentOut
from backend.app.tenancy.detection import Detection

router = APIRouter()


@router.get("/environment", response_model=EnvironmentOut | None)
async def current_environment(
    detection: Annotated[Detection, Depends(get_detection)],
) -> EnvironmentOut | None:
    """Environment the request was addressed to, or null when none matched."""
    environment = detection.environment
    if environment is None:
        return None

    return EnvironmentOut(
        id=environment.id,
        name=environment.name,
        primary_domain=environment.primary_domain,
        detected_domain=detection.domain,
        outcome=detection.outcome,
    )
