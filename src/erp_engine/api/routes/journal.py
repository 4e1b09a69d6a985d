"""Journal entry API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, HTTPException, Path, status

from erp_engine.api.dependencies import ActorId, DbSession, Emitter
from erp_engine.api.schemas import (
    ErrorResponse,
    JournalEntryCreate,
    JournalEntryResponse,
    PostJournalResponse,
)
from erp_engine.ledger import (
    FinanceRepository,
    JournalLineSpec,
    JournalPoster,
    PostJournalCommand,
)

router = APIRouter(prefix="/journal-entries", tags=["journal"])


@router.post(
    "",
    response_model=PostJournalResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def post_journal_entry(
    db: DbSession,
    actor_id: ActorId,
    emitter: Emitter,
    payload: JournalEntryCreate,
) -> PostJournalResponse:
    """Validate and post a balanced journal entry."""
    command = PostJournalCommand(
        entry_date=payload.entry_date,
        reference=payload.reference,
        memo=payload.memo,
        journal_type=payload.journal_type,
        period_id=payload.period_id,
        actor_id=actor_id,
        lines=tuple(
            JournalLineSpec(
                account_code=line.account_code,
                debit=line.debit,
                credit=line.credit,
                auxiliary=line.auxiliary,
                cost_center=line.cost_center,
                description=line.description,
            )
            for line in payload.lines
        ),
    )

    result = await JournalPoster(db).post(command)
    await db.commit()
    emitter.emit_all(result.events)

    return PostJournalResponse(
        entry_id=result.entry_id,
        entry_number=result.entry_number,
        period_id=result.period_id,
        total_debit=result.total_debit,
        total_credit=result.total_credit,
    )


@router.get(
    "/{entry_id}",
    response_model=JournalEntryResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_journal_entry(
    db: DbSession,
    entry_id: Annotated[UUID, Path()],
) -> JournalEntryResponse:
    """Get a posted journal entry with its lines."""
    entry = await FinanceRepository(db).get_entry(entry_id)
    if entry is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Journal entry not found",
        )
    return JournalEntryResponse.model_validate(entry)
