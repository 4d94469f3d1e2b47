from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from casebank.api.deps import db_session
from casebank.core.errors import MalformedTreeError, RestoreStateError
from casebank.restore.walker import BackupElement
from casebank.schemas.restores import RestoreRequest, RestoreResultOut
from casebank.services.restore_service import RestoreService

router = APIRouter(prefix="/restores", tags=["restores"])


@router.post("", response_model=RestoreResultOut)
async def create_restore(payload: RestoreRequest, db: AsyncSession = Depends(db_session)):
    service = RestoreService(db)
    try:
        return await service.restore(
            scope_id=payload.scope_id,
            actor_user_id=payload.actor_user_id,
            elements=[BackupElement(e.path, e.attributes) for e in payload.elements],
            include_user_data=payload.include_user_data,
            same_site_users=payload.same_site_users,
            user_mapping=payload.user_mapping,
            restore_token=payload.restore_token,
        )
    except MalformedTreeError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"path": exc.path, "reason": exc.reason},
        ) from exc
    except RestoreStateError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
