import logging

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy.exc import SQLAlchemyError

from schemas import ReviewersStatsResponse, ReviewerStats, HealthResponse, ErrorResponse
from dependencies import Container, get_container
from errors import ServiceError
from routes.errors import http_error


logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/statistics/reviewers", status_code=status.HTTP_200_OK,
            summary="Number of PR assignments per reviewer",
            response_model=ReviewersStatsResponse,
            responses={404: {"model": ErrorResponse}})
async def reviewers_stats(container: Container = Depends(get_container)):
    try:
        result = await container.reviewer_stats.run()
    except ServiceError as e:
        raise http_error(e)
    return ReviewersStatsResponse(
        reviewers=[ReviewerStats(**row.model_dump()) for row in result.reviewers]
    )


@router.get("/health", response_model=HealthResponse)
async def health(container: Container = Depends(get_container)):
    try:
        await container.database.ping()
    except (SQLAlchemyError, OSError) as e:
        logger.error("Health check failed: %s", e)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "database": "unavailable"}
        )
    return HealthResponse(status="healthy", database="ok")


@router.get("/metrics", include_in_schema=False)
async def metrics(container: Container = Depends(get_container)):
    return Response(content=generate_latest(container.registry), media_type=CONTENT_TYPE_LATEST)
