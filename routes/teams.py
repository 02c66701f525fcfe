from fastapi import APIRouter, Depends, status, Query
from schemas import (
    TeamRequest, TeamCreateResponse, TeamResponse, TeamMember, PullRequestShort,
    DeactivateTeamUsersRequest, DeactivateTeamUsersResponse,
    ErrorResponse
)
from dependencies import Container, get_container
from errors import ServiceError
from routes.errors import http_error
from services.contracts import (
    AddTeamIn, DeactivateTeamUsersIn, GetTeamIn, TeamMemberRecord, TeamRecord
)


router = APIRouter(prefix="/team")


def team_response(record: TeamRecord) -> TeamResponse:
    return TeamResponse(
        team_name=record.team_name,
        members=[TeamMember(**member.model_dump()) for member in record.members]
    )


@router.post("/add", status_code=status.HTTP_201_CREATED,
                  summary="Create a team with members (creates or updates users)",
                  response_model=TeamCreateResponse,
                  responses={400: {"model": ErrorResponse}})
async def add(request: TeamRequest, container: Container = Depends(get_container)):
    try:
        team = await container.add_team.run(AddTeamIn(
            team_name=request.team_name,
            members=[TeamMemberRecord(**member.model_dump()) for member in request.members],
        ))
    except ServiceError as e:
        raise http_error(e)
    return TeamCreateResponse(team=team_response(team))


@router.get("/get", status_code=status.HTTP_200_OK,
                 summary="Get a team with its members",
                 response_model=TeamResponse,
                 responses={404: {"model": ErrorResponse}})
async def get(team_name: str = Query(..., description="Unique team name"),
              container: Container = Depends(get_container)):
    try:
        team = await container.get_team.run(GetTeamIn(team_name=team_name))
    except ServiceError as e:
        raise http_error(e)
    return team_response(team)


@router.patch("/deactivateUsers", status_code=status.HTTP_200_OK,
                  summary="Deactivate team members and reassign their open reviews",
                  response_model=DeactivateTeamUsersResponse,
                  responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}})
async def deactivate_users(request: DeactivateTeamUsersRequest,
                           container: Container = Depends(get_container)):
    try:
        result = await container.deactivate_team_users.run(DeactivateTeamUsersIn(
            team_name=request.team_name,
            user_ids=request.user_ids,
        ))
    except ServiceError as e:
        raise http_error(e)
    return DeactivateTeamUsersResponse(
        team=team_response(result.team),
        affected_pull_requests=[
            PullRequestShort(**pr.model_dump()) for pr in result.affected_pull_requests
        ]
    )
