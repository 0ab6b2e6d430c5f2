"""User prefs endpoints - last viewed plan/week/day."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.schemas.prefs import UserPrefsData, UserPrefsUpdate
from app.services.stores import load_prefs, save_prefs

router = APIRouter()


@router.get("", response_model=UserPrefsData)
async def get_prefs(db: AsyncSession = Depends(get_db)):
    return await load_prefs(db)


@router.patch("", response_model=UserPrefsData)
async def patch_prefs(
    payload: UserPrefsUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Only fields sent in the body are changed; streak data is never touched here."""
    return await save_prefs(db, payload.model_dump(exclude_unset=True))
