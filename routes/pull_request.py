from fastapi import APIRouter, Depends, status
from schemas import (
    PullRequestCreateRequest, PullRequestCreateResponse,
    PullRequestMergeRequest, PullRequestMergeResponse,
    PullRequestReassignRequest, PullRequestReassignResponse,
    PullRequestResponse, ErrorResponse
)
from dependencies import Container, get_container
from errors import ServiceError
from routes.errors import http_error
from services.contracts import (
    CreatePullRequestIn, MergePullRequestIn, PullRequestRecord, ReassignReviewerIn
)


router = APIRouter(prefix="/pullRequest")


def pull_request_response(record: PullRequestRecord) -> PullRequestResponse:
    return PullRequestResponse(
        pull_request_id=record.pull_request_id,
        pull_request_name=record.pull_request_name,
        author_id=record.author_id,
        status=record.status,
        assigned_reviewers=record.assigned_reviewers,
        createdAt=record.created_at,
        mergedAt=record.merged_at,
    )


@router.post("/create", status_code=status.HTTP_201_CREATED,
                summary="Create a PR and assign reviewers from the author's team",
                response_model=PullRequestCreateResponse,
                responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}})
async def create(request: PullRequestCreateRequest, container: Container = Depends(get_container)):
    try:
        pr = await container.create_pull_request.run(CreatePullRequestIn(
            pull_request_id=request.pull_request_id,
            pull_request_name=request.pull_request_name,
            author_id=request.author_id,
        ))
    except ServiceError as e:
        raise http_error(e)
    return PullRequestCreateResponse(pr=pull_request_response(pr))


@router.post("/merge", status_code=status.HTTP_200_OK,
                summary="Mark a PR as MERGED (idempotent)",
                response_model=PullRequestMergeResponse,
                responses={404: {"model": ErrorResponse}})
async def merge(request: PullRequestMergeRequest, container: Container = Depends(get_container)):
    try:
        pr = await container.merge_pull_request.run(MergePullRequestIn(
            pull_request_id=request.pull_request_id,
        ))
    except ServiceError as e:
        raise http_error(e)
    return PullRequestMergeResponse(pr=pull_request_response(pr))


@router.post("/reassign", status_code=status.HTTP_200_OK,
                summary="Replace an assigned reviewer with another member of the author's team",
                response_model=PullRequestReassignResponse,
                responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}})
async def reassign(request: PullRequestReassignRequest, container: Container = Depends(get_container)):
    try:
        result = await container.reassign_reviewer.run(ReassignReviewerIn(
            pull_request_id=request.pull_request_id,
            old_reviewer_id=request.old_reviewer_id,
        ))
    except ServiceError as e:
        raise http_error(e)
    return PullRequestReassignResponse(
        pr=pull_request_response(result.pr),
        replaced_by=result.replaced_by
    )
