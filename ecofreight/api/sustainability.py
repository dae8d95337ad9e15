from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ecofreight.application.schemas import CarbonReport, SuggestionRead
from ecofreight.application.sustainability_service import SustainabilityService
from ecofreight.domain.actors import Actor, Role
from ecofreight.infrastructure.db import get_db
from .deps import get_current_actor, require_roles

router = APIRouter(prefix="/sustainability", tags=["sustainability"])

@router.get("/carbon-report", response_model=CarbonReport)
def carbon_report(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return SustainabilityService(db).carbon_report(actor, start_date, end_date)

@router.post("/shipments/{shipment_id}/suggestions", response_model=list[SuggestionRead], status_code=201)
def generate_suggestions(
    shipment_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles(Role.MANAGER, Role.CUSTOMER)),
):
    return SustainabilityService(db).generate_suggestions(shipment_id, actor)

@router.get("/suggestions", response_model=list[SuggestionRead])
def list_suggestions(
    implemented: Optional[bool] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles(Role.MANAGER)),
):
    return SustainabilityService(db).list_suggestions(implemented)

@router.post("/suggestions/{suggestion_id}/implement", response_model=SuggestionRead)
def implement_suggestion(
    suggestion_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles(Role.MANAGER)),
):
    return SustainabilityService(db).mark_implemented(suggestion_id)
