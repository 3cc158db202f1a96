"""Turfs API routes — public browsing, owner-scoped management, reviews."""

import uuid
from decimal import ROUND_HALF_UP, Decimal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from sportnest.api.deps import get_current_active_user, get_db, require_admin
from sportnest.models.turf import Review, Turf
from sportnest.models.user import User
from sportnest.schemas.auth import MessageResponse
from sportnest.schemas.turf import (
    ReviewCreate,
    ReviewResponse,
    TurfCreate,
    TurfDetailResponse,
    TurfListResponse,
    TurfResponse,
    TurfUpdate,
)
from sportnest.services.account_service import purge_turfs
from sportnest.services.notification_service import notify_turf_owner, review_message

router = APIRouter(prefix="/api/v1/turfs", tags=["turfs"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _get_turf(db: AsyncSession, turf_id: uuid.UUID) -> Turf:
    turf = await db.get(Turf, turf_id)
    if turf is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Turf not found",
        )
    return turf


async def _get_owned_turf(db: AsyncSession, turf_id: uuid.UUID, owner: User) -> Turf:
    """Fetch a turf owned by ``owner``; 404 for missing and foreign turfs alike."""
    turf = await db.get(Turf, turf_id)
    if turf is None or turf.owner_id != owner.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Turf not found or unauthorized",
        )
    return turf


# ---------------------------------------------------------------------------
# Browsing
# ---------------------------------------------------------------------------


@router.get("", response_model=TurfListResponse, summary="List turfs")
async def list_turfs(
    location: str | None = Query(None),
    sport: str | None = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> TurfListResponse:
    filters = []
    if location is not None:
        filters.append(Turf.location == location)
    if sport is not None:
        filters.append(Turf.sport == sport)

    total_result = await db.execute(select(func.count()).select_from(Turf).where(*filters))
    total = total_result.scalar_one()

    result = await db.execute(
        select(Turf).where(*filters).order_by(Turf.created_at.desc(), Turf.name).offset(skip).limit(limit)
    )
    items = list(result.scalars().all())

    return TurfListResponse(
        items=[TurfResponse.model_validate(t) for t in items],
        total=total,
    )


@router.get("/mine", response_model=list[TurfResponse], summary="List the current owner's turfs")
async def list_my_turfs(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> list[TurfResponse]:
    result = await db.execute(select(Turf).where(Turf.owner_id == current_user.id).order_by(Turf.name))
    return [TurfResponse.model_validate(t) for t in result.scalars().all()]


@router.get("/{turf_id}", response_model=TurfDetailResponse, summary="Get a turf with its reviews")
async def get_turf(
    turf_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> TurfDetailResponse:
    turf = await _get_turf(db, turf_id)
    return TurfDetailResponse.model_validate(turf)


# ---------------------------------------------------------------------------
# Owner management
# ---------------------------------------------------------------------------


@router.post("", response_model=TurfResponse, status_code=status.HTTP_201_CREATED, summary="List a new turf")
async def create_turf(
    body: TurfCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> TurfResponse:
    turf = Turf(owner_id=current_user.id, **body.model_dump())
    db.add(turf)
    await db.flush()
    await db.refresh(turf)
    return TurfResponse.model_validate(turf)


@router.put("/{turf_id}", response_model=TurfResponse, summary="Update a turf")
async def update_turf(
    turf_id: uuid.UUID,
    body: TurfUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> TurfResponse:
    """Partially update a turf. Only explicitly set fields are changed."""
    turf = await _get_owned_turf(db, turf_id, current_user)

    for field, value in body.model_dump(exclude_unset=True).items():
        setattr(turf, field, value)

    db.add(turf)
    await db.flush()
    await db.refresh(turf)
    return TurfResponse.model_validate(turf)


@router.delete("/{turf_id}", response_model=MessageResponse, summary="Delete a turf")
async def delete_turf(
    turf_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> dict:
    """Delete a turf and everything booked, paid, reviewed or favorited on it."""
    turf = await _get_owned_turf(db, turf_id, current_user)
    await purge_turfs(db, [turf.id])
    return {"message": "Turf deleted successfully"}


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------


@router.get("/{turf_id}/reviews", response_model=list[ReviewResponse], summary="List reviews for a turf")
async def list_reviews(
    turf_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> list[ReviewResponse]:
    await _get_turf(db, turf_id)
    result = await db.execute(select(Review).where(Review.turf_id == turf_id).order_by(Review.created_at.desc()))
    return [ReviewResponse.model_validate(r) for r in result.scalars().all()]


@router.post(
    "/{turf_id}/reviews",
    response_model=TurfDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Review a turf",
)
async def add_review(
    turf_id: uuid.UUID,
    body: ReviewCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> TurfDetailResponse:
    """Add a review, refresh the turf's average rating and notify its owner."""
    turf = await _get_turf(db, turf_id)

    review = Review(turf_id=turf.id, user_id=current_user.id, rating=body.rating, comment=body.comment)
    db.add(review)
    await db.flush()

    avg_result = await db.execute(select(func.avg(Review.rating)).where(Review.turf_id == turf.id))
    average = avg_result.scalar_one()
    turf.average_rating = Decimal(str(average)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    db.add(turf)

    await notify_turf_owner(
        db,
        actor_id=current_user.id,
        turf=turf,
        notification_type="review",
        message=review_message(turf, body.rating),
    )
    await db.refresh(turf)
    return TurfDetailResponse.model_validate(turf)
