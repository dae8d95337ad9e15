from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ecofreight.application.review_service import ReviewService
from ecofreight.application.schemas import ReviewRead
from ecofreight.domain.actors import Actor, Role
from ecofreight.infrastructure.db import get_db
from .deps import require_roles

router = APIRouter(prefix="/reviews", tags=["reviews"])

@router.get("/", response_model=list[ReviewRead])
def list_reviews(
    approved: Optional[bool] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles(Role.MANAGER)),
):
    """Moderation queue; pass approved=false for pending reviews."""
    return ReviewService(db).list_reviews(approved=approved)

@router.post("/{review_id}/approve", response_model=ReviewRead)
def approve_review(review_id: str, db: Session = Depends(get_db), actor: Actor = Depends(require_roles(Role.MANAGER))):
    return ReviewService(db).approve(review_id)
