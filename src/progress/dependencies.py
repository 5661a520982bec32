"""FastAPI dependencies for progress tracking."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import CompletionService, ProgressAggregator


def _from_state(request: Request, name: str):
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Progress service not available",
        )
    return service


async def get_progress_aggregator(request: Request) -> ProgressAggregator:
    """Get progress aggregator from app state."""
    return _from_state(request, "progress_aggregator")


async def get_completion_service(request: Request) -> CompletionService:
    """Get completion service from app state."""
    return _from_state(request, "completion_service")


ProgressAggregatorDep = Annotated[ProgressAggregator, Depends(get_progress_aggregator)]
CompletionServiceDep = Annotated[CompletionService, Depends(get_completion_service)]
