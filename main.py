from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from prometheus_client import CollectorRegistry
from sqlalchemy.ext.asyncio import async_sessionmaker
import uvicorn

from clock import Clock
from config import Settings, get_settings
from dependencies import Container
from logging_config import setup_logging
from models.database import create_engine, create_session_maker, init_db
from routes import users, teams, pull_request, system
from services.reviewers import Randomizer


def create_app(
    settings: Optional[Settings] = None,
    session_maker: Optional[async_sessionmaker] = None,
    randomizer: Optional[Randomizer] = None,
    clock: Optional[Clock] = None,
    registry: Optional[CollectorRegistry] = None,
) -> FastAPI:
    settings = settings or get_settings()
    engine = None
    if session_maker is None:
        engine = create_engine(settings)
        session_maker = create_session_maker(engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings)
        if engine is not None:
            await init_db(engine)

        yield

        if engine is not None:
            await engine.dispose()

    app = FastAPI(title="PR Reviewer Assignment Service", lifespan=lifespan,
                  root_path=settings.ROOT_PATH or "")
    app.state.container = Container(settings, session_maker, randomizer, clock, registry)

    app.include_router(users.router)
    app.include_router(teams.router)
    app.include_router(pull_request.router)
    app.include_router(system.router)
    return app


app = create_app()


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
