"""
Delivery update recording.

Recording runs as three stages that fail independently:

1. persist the update row (errors here fail the whole call),
2. move the shipment to the reported status when it differs (an invalid edge
   or failed write is reported as a partial outcome, the row stays),
3. ask the verification service for a reference and attach it (failures are
   logged and never reported to the caller).
"""

from typing import Optional

from sqlalchemy.orm import Session

from ecofreight.core.logging_config import get_logger
from ecofreight.domain import lifecycle
from ecofreight.domain.actors import Actor, Role
from ecofreight.domain.errors import InvalidTransition, NotEligible, PersistenceError, ValidationError
from ecofreight.domain.lifecycle import ShipmentStatus
from ecofreight.domain.models import DeliveryUpdate, Shipment, utcnow
from ecofreight.infrastructure.verification import UpdateOperation, VerificationClient, try_submit
from .base import Clock, ServiceBase
from .schemas import DeliveryUpdateCreate, DeliveryUpdateRead, RecordUpdateResult, UpdateOutcome
from .shipment_service import ShipmentService

logger = get_logger(__name__)

class DeliveryUpdateRecorder(ServiceBase):
    def __init__(self, db: Session, verifier: Optional[VerificationClient] = None, clock: Clock = utcnow):
        super().__init__(db, verifier, clock)
        self.shipments = ShipmentService(db, verifier, clock)

    def record_update(self, shipment_id: str, actor: Actor, data: DeliveryUpdateCreate) -> RecordUpdateResult:
        location = (data.location or "").strip()
        if not location:
            raise ValidationError("Location is required")
        target = lifecycle.parse_status(data.status)

        shipment = self.shipments.get(shipment_id)
        self._ensure_can_record(shipment, actor)
        if shipment.status == ShipmentStatus.DELIVERED.value and target is not ShipmentStatus.DELIVERED:
            raise InvalidTransition(shipment.status, target.value)

        update = self._persist(shipment, actor, target, location, data)
        outcome, status_error = self._advance_status(shipment, target)
        self._verify(update, actor)

        return RecordUpdateResult(
            update=DeliveryUpdateRead.model_validate(update),
            outcome=outcome,
            shipment_status=shipment.status,
            status_changed=outcome is UpdateOutcome.RECORDED_AND_TRANSITIONED,
            status_error=status_error,
        )

    @staticmethod
    def _ensure_can_record(shipment: Shipment, actor: Actor) -> None:
        if actor.is_manager:
            return
        if actor.role is not Role.DRIVER or shipment.assigned_driver_id != actor.user_id:
            raise NotEligible("Only the assigned driver can record delivery updates for this shipment")

    def _persist(
        self,
        shipment: Shipment,
        actor: Actor,
        target: ShipmentStatus,
        location: str,
        data: DeliveryUpdateCreate,
    ) -> DeliveryUpdate:
        notes = (data.notes or "").strip() or None
        update = DeliveryUpdate(
            shipment_id=shipment.id,
            status=target.value,
            location=location,
            notes=notes,
            temperature=data.temperature,
            humidity=data.humidity,
            shock_detected=data.shock_detected,
            latitude=data.latitude,
            longitude=data.longitude,
            battery_level=data.battery_level,
            recorded_by=actor.user_id,
            created_at=self.clock(),
        )
        self.db.add(update)
        self._commit("record the delivery update")
        logger.info(
            "Delivery update recorded",
            extra={'extra_fields': {
                'shipment_id': shipment.id,
                'update_id': update.id,
                'status': update.status,
                'shock_detected': update.shock_detected,
            }}
        )
        return update

    def _advance_status(self, shipment: Shipment, target: ShipmentStatus) -> tuple[UpdateOutcome, Optional[str]]:
        if shipment.status == target.value:
            return UpdateOutcome.RECORDED, None
        try:
            self.shipments.transition(shipment, target.value)
        except InvalidTransition as e:
            logger.warning(
                "Delivery update kept but status change rejected",
                extra={'extra_fields': {'shipment_id': shipment.id, 'from_status': e.current, 'to_status': e.requested}}
            )
            return UpdateOutcome.RECORDED_TRANSITION_REJECTED, e.detail
        except PersistenceError as e:
            return UpdateOutcome.RECORDED_TRANSITION_FAILED, e.detail
        return UpdateOutcome.RECORDED_AND_TRANSITIONED, None

    def _verify(self, update: DeliveryUpdate, actor: Actor) -> None:
        reference = try_submit(self.verifier, UpdateOperation(
            shipment_id=update.shipment_id,
            status=update.status,
            metadata={
                'update_id': update.id,
                'location': update.location,
                'driver_id': actor.user_id,
                'timestamp': update.created_at.isoformat(),
            },
        ))
        self._attach_reference(update, reference)
