"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from erp_engine.database import init_db
from erp_engine.events import EventEmitter
from erp_engine.payroll import PayrollCalculator


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    _, factory = init_db()
    async with factory() as session:
        try:
            yield session
        finally:
            await session.close()


async def get_actor_id(
    x_user_id: Annotated[str | None, Header()] = None
) -> str | None:
    """Authenticated caller, as forwarded by the gateway."""
    if x_user_id is None:
        return None
    return x_user_id.strip() or None


def get_event_emitter(request: Request) -> EventEmitter:
    return request.app.state.event_emitter


def get_payroll_calculator(request: Request) -> PayrollCalculator:
    return request.app.state.payroll_calculator


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
ActorId = Annotated[str | None, Depends(get_actor_id)]
Emitter = Annotated[EventEmitter, Depends(get_event_emitter)]
Calculator = Annotated[PayrollCalculator, Depends(get_payroll_calculator)]
