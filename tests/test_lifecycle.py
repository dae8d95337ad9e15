from types import SimpleNamespace

import pytest

from ecofreight.domain import lifecycle
from ecofreight.domain.errors import InvalidTransition, ValidationError
from ecofreight.domain.lifecycle import ShipmentStatus
from tests.support import CUSTOMER_ID, FIXED_NOW, OTHER_CUSTOMER_ID

ALLOWED = [
    ("processing", "in-transit"),
    ("processing", "delayed"),
    ("in-transit", "delivered"),
    ("in-transit", "delayed"),
    ("delayed", "in-transit"),
]


def _shipment(status, customer_id=CUSTOMER_ID):
    return SimpleNamespace(status=status, actual_arrival_date=None, customer_id=customer_id)


@pytest.mark.parametrize("current,new", ALLOWED)
def test_allowed_edges(current, new):
    shipment = _shipment(current)
    lifecycle.apply_transition(shipment, new, FIXED_NOW)
    assert shipment.status == new


@pytest.mark.parametrize(
    "current,new",
    [
        (c.value, n.value)
        for c in ShipmentStatus
        for n in ShipmentStatus
        if (c.value, n.value) not in ALLOWED
    ],
)
def test_other_pairs_are_rejected_without_mutation(current, new):
    shipment = _shipment(current)
    with pytest.raises(InvalidTransition):
        lifecycle.apply_transition(shipment, new, FIXED_NOW)
    assert shipment.status == current
    assert shipment.actual_arrival_date is None


@pytest.mark.parametrize("new", [s.value for s in ShipmentStatus])
def test_delivered_has_no_outgoing_edges(new):
    assert not lifecycle.can_transition("delivered", new)


def test_entering_delivered_stamps_actual_arrival():
    shipment = _shipment("in-transit")
    lifecycle.apply_transition(shipment, "delivered", FIXED_NOW)
    assert shipment.actual_arrival_date == FIXED_NOW


@pytest.mark.parametrize("current,new", [e for e in ALLOWED if e[1] != "delivered"])
def test_other_transitions_leave_actual_arrival_empty(current, new):
    shipment = _shipment(current)
    lifecycle.apply_transition(shipment, new, FIXED_NOW)
    assert shipment.actual_arrival_date is None


def test_unknown_status_is_a_validation_error():
    with pytest.raises(ValidationError):
        lifecycle.apply_transition(_shipment("processing"), "lost", FIXED_NOW)


def test_can_review_requires_delivery_and_ownership():
    assert not lifecycle.can_review(_shipment("in-transit"), CUSTOMER_ID)
    assert lifecycle.can_review(_shipment("delivered"), CUSTOMER_ID)
    assert not lifecycle.can_review(_shipment("delivered", customer_id=OTHER_CUSTOMER_ID), CUSTOMER_ID)
