"""
Shipment status state machine.

processing -> in-transit -> delivered, with delayed reachable from
processing or in-transit and returning to in-transit. delivered is terminal.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, Protocol

from .errors import InvalidTransition, ValidationError


class ShipmentStatus(str, Enum):
    PROCESSING = "processing"
    IN_TRANSIT = "in-transit"
    DELIVERED = "delivered"
    DELAYED = "delayed"


ALLOWED_TRANSITIONS: dict[ShipmentStatus, frozenset[ShipmentStatus]] = {
    ShipmentStatus.PROCESSING: frozenset({ShipmentStatus.IN_TRANSIT, ShipmentStatus.DELAYED}),
    ShipmentStatus.IN_TRANSIT: frozenset({ShipmentStatus.DELIVERED, ShipmentStatus.DELAYED}),
    ShipmentStatus.DELAYED: frozenset({ShipmentStatus.IN_TRANSIT}),
    ShipmentStatus.DELIVERED: frozenset(),
}


class _Trackable(Protocol):
    status: str
    actual_arrival_date: Optional[datetime]


class _Reviewable(Protocol):
    status: str
    customer_id: str


def parse_status(value: str) -> ShipmentStatus:
    try:
        return ShipmentStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in ShipmentStatus)
        raise ValidationError(f"Unknown shipment status '{value}' (expected one of: {allowed})") from None


def can_transition(current: str, new: str) -> bool:
    return ShipmentStatus(new) in ALLOWED_TRANSITIONS[ShipmentStatus(current)]


def apply_transition(shipment: _Trackable, new_status: str, now: datetime) -> ShipmentStatus:
    """Move the shipment to new_status in memory, or raise without touching it.

    Entering delivered stamps actual_arrival_date with now.
    """
    target = parse_status(new_status)
    current = ShipmentStatus(shipment.status)
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransition(current.value, target.value)
    shipment.status = target.value
    if target is ShipmentStatus.DELIVERED:
        shipment.actual_arrival_date = now
    return target


def can_review(shipment: _Reviewable, user_id: str) -> bool:
    return shipment.status == ShipmentStatus.DELIVERED.value and shipment.customer_id == user_id
