"""Repository dependencies for route handlers."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tourdesk.app.db.engine import get_session
from tourdesk.app.db.sql_repositories import (
    SqlB2BRepository,
    SqlRateRepository,
    SqlTourRepository,
)


async def get_rate_repository(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SqlRateRepository:
    return SqlRateRepository(session)


async def get_tour_repository(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SqlTourRepository:
    return SqlTourRepository(session)


async def get_b2b_repository(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SqlB2BRepository:
    return SqlB2BRepository(session)
