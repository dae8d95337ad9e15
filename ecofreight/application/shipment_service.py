import secrets
import string
from typing import Optional

from sqlalchemy.orm import Session

from ecofreight.core.logging_config import get_logger
from ecofreight.core_settings import get_settings
from ecofreight.domain import lifecycle
from ecofreight.domain.actors import Actor, Role
from ecofreight.domain.carbon import carbon_footprint_kg
from ecofreight.domain.errors import NotEligible, NotFound, ValidationError
from ecofreight.domain.lifecycle import ShipmentStatus
from ecofreight.domain.models import DeliveryUpdate, Shipment, as_utc, utcnow
from ecofreight.infrastructure.verification import (
    RegisterOperation,
    ShipmentData,
    UpdateOperation,
    VerificationClient,
    try_submit,
)
from .base import Clock, ServiceBase
from .schemas import ShipmentCreate

logger = get_logger(__name__)

TRACKING_PREFIX = "ECO-"
TRACKING_ALPHABET = string.ascii_uppercase + string.digits

class ShipmentService(ServiceBase):
    """Shipment lifecycle: creation, status transitions and status-gated checks."""

    def __init__(
        self,
        db: Session,
        verifier: Optional[VerificationClient] = None,
        clock: Clock = utcnow,
        default_distance_km: Optional[float] = None,
    ):
        super().__init__(db, verifier, clock)
        self.default_distance_km = default_distance_km or get_settings().DEFAULT_DISTANCE_KM

    def _generate_tracking_id(self) -> str:
        for _ in range(5):
            candidate = TRACKING_PREFIX + "".join(secrets.choice(TRACKING_ALPHABET) for _ in range(8))
            if not self.db.query(Shipment.id).filter(Shipment.tracking_id == candidate).first():
                return candidate
        raise ValidationError("Could not allocate a unique tracking id")

    def create(self, data: ShipmentCreate) -> Shipment:
        if as_utc(data.estimated_arrival_date) < as_utc(data.planned_departure_date):
            raise ValidationError("Estimated arrival must not be before planned departure")

        distance = data.distance_km or self.default_distance_km
        shipment = Shipment(
            tracking_id=self._generate_tracking_id(),
            title=data.title.strip(),
            description=data.description,
            origin=data.origin.strip(),
            destination=data.destination.strip(),
            transport_type=data.transport_type.value,
            product_type=data.product_type,
            quantity=data.quantity,
            weight=data.weight,
            distance_km=distance,
            carbon_footprint=carbon_footprint_kg(data.transport_type.value, data.weight, distance),
            status=ShipmentStatus.PROCESSING.value,
            planned_departure_date=data.planned_departure_date,
            estimated_arrival_date=data.estimated_arrival_date,
            customer_id=data.customer_id,
            assigned_driver_id=data.assigned_driver_id,
        )
        self.db.add(shipment)
        self._commit("create the shipment")
        logger.info(
            "Shipment created",
            extra={'extra_fields': {
                'shipment_id': shipment.id,
                'tracking_id': shipment.tracking_id,
                'carbon_footprint': shipment.carbon_footprint,
            }}
        )

        reference = try_submit(self.verifier, RegisterOperation(shipment_data=ShipmentData(
            id=shipment.id,
            transport_type=shipment.transport_type,
            distance_km=shipment.distance_km,
            carbon_footprint=shipment.carbon_footprint,
            origin=shipment.origin,
            destination=shipment.destination,
        )))
        self._attach_reference(shipment, reference)
        return shipment

    def get(self, shipment_id: str) -> Shipment:
        shipment = self.db.get(Shipment, shipment_id)
        if shipment is None:
            raise NotFound(f"Shipment {shipment_id} not found")
        return shipment

    def get_by_tracking_id(self, tracking_id: str) -> Shipment:
        shipment = self.db.query(Shipment).filter(Shipment.tracking_id == tracking_id.strip().upper()).first()
        if shipment is None:
            raise NotFound(f"No shipment with tracking id {tracking_id}")
        return shipment

    def get_visible(self, shipment_id: str, actor: Actor) -> Shipment:
        shipment = self.get(shipment_id)
        self.ensure_visible(shipment, actor)
        return shipment

    @staticmethod
    def ensure_visible(shipment: Shipment, actor: Actor) -> None:
        if actor.role is Role.CUSTOMER and shipment.customer_id != actor.user_id:
            raise NotEligible("This shipment belongs to another customer")
        if actor.role is Role.DRIVER and shipment.assigned_driver_id != actor.user_id:
            raise NotEligible("This shipment is not assigned to you")

    def list_shipments(self, actor: Actor, status: Optional[ShipmentStatus] = None) -> list[Shipment]:
        query = self.db.query(Shipment)
        if actor.role is Role.CUSTOMER:
            query = query.filter(Shipment.customer_id == actor.user_id)
        elif actor.role is Role.DRIVER:
            query = query.filter(Shipment.assigned_driver_id == actor.user_id)
        if status is not None:
            query = query.filter(Shipment.status == status.value)
        return query.order_by(Shipment.created_at.desc()).all()

    def list_updates(self, shipment_id: str, actor: Actor) -> list[DeliveryUpdate]:
        self.get_visible(shipment_id, actor)
        return (
            self.db.query(DeliveryUpdate)
            .filter(DeliveryUpdate.shipment_id == shipment_id)
            .order_by(DeliveryUpdate.created_at.desc())
            .all()
        )

    def transition(self, shipment: Shipment, new_status: str) -> Shipment:
        """Persist a lifecycle transition.

        Raises InvalidTransition without touching the shipment when the edge
        is not allowed, and PersistenceError when the write fails.
        """
        previous = shipment.status
        lifecycle.apply_transition(shipment, new_status, self.clock())
        self._commit("update the shipment status")
        logger.info(
            "Shipment status changed",
            extra={'extra_fields': {
                'shipment_id': shipment.id,
                'from_status': previous,
                'to_status': shipment.status,
            }}
        )
        return shipment

    def change_status(self, shipment_id: str, new_status: ShipmentStatus, actor: Actor) -> Shipment:
        shipment = self.get(shipment_id)
        if not actor.is_manager:
            if actor.role is not Role.DRIVER or shipment.assigned_driver_id != actor.user_id:
                raise NotEligible("Only the assigned driver or a manager can change this shipment's status")
        self.transition(shipment, new_status.value)

        reference = try_submit(self.verifier, UpdateOperation(
            shipment_id=shipment.id,
            status=shipment.status,
            metadata={'actor_id': actor.user_id, 'timestamp': self.clock().isoformat()},
        ))
        self._attach_reference(shipment, reference)
        return shipment

    @staticmethod
    def can_review(shipment: Shipment, user_id: str) -> bool:
        return lifecycle.can_review(shipment, user_id)
