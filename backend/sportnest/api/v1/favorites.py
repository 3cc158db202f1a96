"""Favorites API router: bookmark turfs."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from sportnest.api.deps import get_current_active_user, get_db
from sportnest.models.favorite import Favorite
from sportnest.models.turf import Turf
from sportnest.models.user import User
from sportnest.schemas.auth import MessageResponse
from sportnest.schemas.turf import FavoriteResponse

router = APIRouter(prefix="/api/v1/favorites", tags=["favorites"])


@router.get("", response_model=list[FavoriteResponse])
async def list_favorites(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[Favorite]:
    result = await db.execute(
        select(Favorite).where(Favorite.user_id == current_user.id).order_by(Favorite.created_at.desc())
    )
    return list(result.scalars().all())


@router.post("/{turf_id}", response_model=FavoriteResponse, status_code=status.HTTP_201_CREATED)
async def add_favorite(
    turf_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Favorite:
    """Bookmark a turf. Adding an existing favorite returns it unchanged."""
    turf = await db.get(Turf, turf_id)
    if turf is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Turf not found",
        )

    result = await db.execute(
        select(Favorite).where(Favorite.user_id == current_user.id, Favorite.turf_id == turf_id)
    )
    favorite = result.scalar_one_or_none()
    if favorite is not None:
        return favorite

    favorite = Favorite(user_id=current_user.id, turf=turf)
    db.add(favorite)
    await db.flush()
    await db.refresh(favorite, attribute_names=["created_at"])
    return favorite


@router.delete("/{turf_id}", response_model=MessageResponse)
async def remove_favorite(
    turf_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> dict:
    result = await db.execute(
        delete(Favorite).where(Favorite.user_id == current_user.id, Favorite.turf_id == turf_id)
    )
    if result.rowcount == 0:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Favorite not found",
        )
    return {"message": "Removed from favorites"}
