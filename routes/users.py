from fastapi import APIRouter, Depends, status, Query
from schemas import (
    SetIsActiveRequest, UserUpdateResponse, UserResponse, GetReviewResponse,
    PullRequestShort, ErrorResponse
)
from dependencies import Container, get_container
from errors import ServiceError
from routes.errors import http_error
from services.contracts import GetReviewIn, SetIsActiveIn


router = APIRouter(prefix="/users")


@router.post("/setIsActive", status_code=status.HTTP_200_OK,
                   summary="Set the user's is_active flag",
                   response_model=UserUpdateResponse,
                   responses={404: {"model": ErrorResponse}})
async def setIsActive(request: SetIsActiveRequest, container: Container = Depends(get_container)):
    try:
        user = await container.set_is_active.run(SetIsActiveIn(
            user_id=request.user_id,
            is_active=request.is_active,
        ))
    except ServiceError as e:
        raise http_error(e)
    return UserUpdateResponse(user=UserResponse(**user.model_dump()))


@router.get("/getReview", status_code=status.HTTP_200_OK,
                  summary="Get PRs where the user is assigned as a reviewer",
                  response_model=GetReviewResponse,
                  responses={404: {"model": ErrorResponse}})
async def getReview(user_id: str = Query(..., description="User identifier"),
                    container: Container = Depends(get_container)):
    try:
        result = await container.get_review.run(GetReviewIn(user_id=user_id))
    except ServiceError as e:
        raise http_error(e)
    return GetReviewResponse(
        user_id=result.user_id,
        pull_requests=[PullRequestShort(**pr.model_dump()) for pr in result.pull_requests]
    )
