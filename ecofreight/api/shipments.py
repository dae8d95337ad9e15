from typing import Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ecofreight.application.review_service import ReviewService
from ecofreight.application.schemas import (
    DeliveryUpdateCreate,
    DeliveryUpdateRead,
    RecordUpdateResult,
    ReviewCreate,
    ReviewRead,
    ReviewSubmission,
    ShipmentCreate,
    ShipmentRead,
    StatusChange,
)
from ecofreight.application.shipment_service import ShipmentService
from ecofreight.application.update_service import DeliveryUpdateRecorder
from ecofreight.domain.actors import Actor, Role
from ecofreight.domain.lifecycle import ShipmentStatus
from ecofreight.infrastructure.db import get_db
from ecofreight.infrastructure.verification import VerificationClient
from .deps import get_current_actor, get_verifier, require_roles

router = APIRouter(prefix="/shipments", tags=["shipments"])

@router.get("/", response_model=list[ShipmentRead])
def list_shipments(
    status: Optional[ShipmentStatus] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Managers see every shipment, customers their own, drivers their assignments."""
    return ShipmentService(db).list_shipments(actor, status)

@router.post("/", response_model=ShipmentRead, status_code=201)
def create_shipment(
    payload: ShipmentCreate,
    db: Session = Depends(get_db),
    verifier: VerificationClient = Depends(get_verifier),
    actor: Actor = Depends(require_roles(Role.MANAGER)),
):
    return ShipmentService(db, verifier).create(payload)

@router.get("/track/{tracking_id}", response_model=ShipmentRead)
def track_shipment(tracking_id: str, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    service = ShipmentService(db)
    shipment = service.get_by_tracking_id(tracking_id)
    service.ensure_visible(shipment, actor)
    return shipment

@router.get("/{shipment_id}", response_model=ShipmentRead)
def get_shipment(shipment_id: str, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return ShipmentService(db).get_visible(shipment_id, actor)

@router.patch("/{shipment_id}/status", response_model=ShipmentRead)
def change_status(
    shipment_id: str,
    payload: StatusChange,
    db: Session = Depends(get_db),
    verifier: VerificationClient = Depends(get_verifier),
    actor: Actor = Depends(require_roles(Role.DRIVER, Role.MANAGER)),
):
    return ShipmentService(db, verifier).change_status(shipment_id, payload.status, actor)

@router.get("/{shipment_id}/updates", response_model=list[DeliveryUpdateRead])
def list_updates(shipment_id: str, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    """Delivery history, newest first."""
    return ShipmentService(db).list_updates(shipment_id, actor)

@router.post("/{shipment_id}/updates", response_model=RecordUpdateResult, status_code=201)
def record_update(
    shipment_id: str,
    payload: DeliveryUpdateCreate,
    db: Session = Depends(get_db),
    verifier: VerificationClient = Depends(get_verifier),
    actor: Actor = Depends(require_roles(Role.DRIVER, Role.MANAGER)),
):
    return DeliveryUpdateRecorder(db, verifier).record_update(shipment_id, actor, payload)

@router.get("/{shipment_id}/review-eligibility")
def review_eligibility(shipment_id: str, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    service = ShipmentService(db)
    shipment = service.get_visible(shipment_id, actor)
    return {"shipment_id": shipment.id, "can_review": service.can_review(shipment, actor.user_id)}

@router.get("/{shipment_id}/reviews", response_model=list[ReviewRead])
def list_shipment_reviews(shipment_id: str, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    ShipmentService(db).get_visible(shipment_id, actor)
    return ReviewService(db).list_reviews(shipment_id=shipment_id)

@router.post("/{shipment_id}/reviews", response_model=ReviewSubmission, status_code=201)
def submit_review(
    shipment_id: str,
    payload: ReviewCreate,
    response: Response,
    db: Session = Depends(get_db),
    verifier: VerificationClient = Depends(get_verifier),
    actor: Actor = Depends(require_roles(Role.CUSTOMER)),
):
    review, created = ReviewService(db, verifier).submit_review(shipment_id, actor.user_id, payload.rating, payload.comment)
    if not created:
        response.status_code = 200
    return ReviewSubmission(review=ReviewRead.model_validate(review), created=created)
