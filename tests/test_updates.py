import pytest

from ecofreight.application.schemas import DeliveryUpdateCreate, UpdateOutcome
from ecofreight.application.update_service import DeliveryUpdateRecorder
from ecofreight.domain.actors import Actor, Role
from ecofreight.domain.errors import InvalidTransition, NotEligible, NotFound, PersistenceError, ValidationError
from ecofreight.domain.models import DeliveryUpdate
from tests.support import FIXED_NOW, OTHER_DRIVER_ID


@pytest.fixture
def recorder(db, verifier, clock):
    return DeliveryUpdateRecorder(db, verifier, clock)


def _update(status, location="Chicago, IL", **extra):
    return DeliveryUpdateCreate(status=status, location=location, **extra)


def _stored_updates(db, shipment_id):
    return db.query(DeliveryUpdate).filter(DeliveryUpdate.shipment_id == shipment_id).all()


def test_update_moves_shipment_along_and_stamps_arrival(db, recorder, driver, make_shipment):
    shipment = make_shipment("processing")

    first = recorder.record_update(shipment.id, driver, _update("in-transit", "Buffalo, NY"))
    assert first.outcome is UpdateOutcome.RECORDED_AND_TRANSITIONED
    assert first.status_changed
    assert shipment.actual_arrival_date is None

    second = recorder.record_update(shipment.id, driver, _update("delivered"))
    assert second.outcome is UpdateOutcome.RECORDED_AND_TRANSITIONED
    assert second.shipment_status == "delivered"
    assert shipment.status == "delivered"
    assert shipment.actual_arrival_date == FIXED_NOW
    assert second.update.location == "Chicago, IL"
    assert second.update.recorded_by == driver.user_id
    assert len(_stored_updates(db, shipment.id)) == 2


def test_same_status_update_is_recorded_without_transition(db, recorder, driver, make_shipment):
    shipment = make_shipment("in-transit")

    result = recorder.record_update(shipment.id, driver, _update("in-transit", temperature=4.5, shock_detected=False))

    assert result.outcome is UpdateOutcome.RECORDED
    assert not result.status_changed
    assert result.update.temperature == 4.5
    assert shipment.status == "in-transit"


@pytest.mark.parametrize("location", ["", "   "])
def test_missing_location_persists_nothing(db, recorder, driver, make_shipment, location):
    shipment = make_shipment("in-transit")

    with pytest.raises(ValidationError):
        recorder.record_update(shipment.id, driver, _update("delivered", location))

    assert _stored_updates(db, shipment.id) == []
    assert shipment.status == "in-transit"


def test_unknown_status_is_a_validation_error(db, recorder, driver, make_shipment):
    shipment = make_shipment("in-transit")

    with pytest.raises(ValidationError):
        recorder.record_update(shipment.id, driver, _update("lost-at-sea"))

    assert _stored_updates(db, shipment.id) == []


def test_unknown_shipment_is_not_found(recorder, driver):
    with pytest.raises(NotFound):
        recorder.record_update("missing", driver, _update("in-transit"))


def test_only_the_assigned_driver_may_record(db, recorder, make_shipment):
    shipment = make_shipment("in-transit")
    stranger = Actor(user_id=OTHER_DRIVER_ID, role=Role.DRIVER)

    with pytest.raises(NotEligible):
        recorder.record_update(shipment.id, stranger, _update("delivered"))

    assert _stored_updates(db, shipment.id) == []


def test_customers_cannot_record(recorder, customer, make_shipment):
    shipment = make_shipment("in-transit")

    with pytest.raises(NotEligible):
        recorder.record_update(shipment.id, customer, _update("delivered"))


def test_manager_may_record_for_any_shipment(recorder, manager, make_shipment):
    shipment = make_shipment("processing", driver_id=None)

    result = recorder.record_update(shipment.id, manager, _update("delayed", "Depot"))

    assert result.outcome is UpdateOutcome.RECORDED_AND_TRANSITIONED
    assert shipment.status == "delayed"


def test_rejected_transition_keeps_the_update(db, recorder, driver, make_shipment):
    shipment = make_shipment("processing")

    result = recorder.record_update(shipment.id, driver, _update("delivered"))

    assert result.outcome is UpdateOutcome.RECORDED_TRANSITION_REJECTED
    assert not result.status_changed
    assert result.status_error
    assert result.shipment_status == "processing"
    assert shipment.actual_arrival_date is None
    assert [u.status for u in _stored_updates(db, shipment.id)] == ["delivered"]


def test_failed_status_write_is_reported_not_raised(db, recorder, driver, make_shipment, monkeypatch):
    shipment = make_shipment("in-transit")

    def failing_transition(target, new_status):
        raise PersistenceError("Could not update the shipment status. Please try again.")

    monkeypatch.setattr(recorder.shipments, "transition", failing_transition)
    result = recorder.record_update(shipment.id, driver, _update("delivered"))

    assert result.outcome is UpdateOutcome.RECORDED_TRANSITION_FAILED
    assert result.status_error
    assert len(_stored_updates(db, shipment.id)) == 1


def test_delivered_shipment_accepts_no_other_status(db, recorder, driver, make_shipment):
    shipment = make_shipment("delivered")

    with pytest.raises(InvalidTransition):
        recorder.record_update(shipment.id, driver, _update("in-transit"))

    assert _stored_updates(db, shipment.id) == []


def test_delivered_shipment_accepts_a_closing_note(recorder, driver, make_shipment):
    shipment = make_shipment("delivered")

    result = recorder.record_update(shipment.id, driver, _update("delivered", notes="Signed by reception"))

    assert result.outcome is UpdateOutcome.RECORDED
    assert result.update.notes == "Signed by reception"


def test_verification_reference_is_attached(db, recorder, driver, make_shipment, verification_endpoint):
    shipment = make_shipment("in-transit")

    result = recorder.record_update(shipment.id, driver, _update("delivered"))

    stored = _stored_updates(db, shipment.id)[0]
    assert stored.verification_ref == "0x" + "0" * 63 + "1"
    assert result.update.verification_ref == stored.verification_ref

    [body] = verification_endpoint.requests
    assert body["operation"] == "update"
    assert body["shipmentId"] == shipment.id
    assert body["status"] == "delivered"
    assert body["metadata"]["update_id"] == stored.id
    assert body["metadata"]["location"] == "Chicago, IL"
    assert body["metadata"]["driver_id"] == driver.user_id
    assert body["metadata"]["timestamp"] == FIXED_NOW.isoformat()


@pytest.mark.parametrize("mode", ["timeout", "error", "rejected"])
def test_verification_failure_does_not_fail_the_update(db, recorder, driver, make_shipment, verification_endpoint, mode):
    verification_endpoint.mode = mode
    shipment = make_shipment("in-transit")

    result = recorder.record_update(shipment.id, driver, _update("delivered"))

    assert result.outcome is UpdateOutcome.RECORDED_AND_TRANSITIONED
    [stored] = _stored_updates(db, shipment.id)
    assert stored.verification_ref is None
    assert shipment.status == "delivered"


def test_recording_without_verifier(db, driver, clock, make_shipment):
    shipment = make_shipment("in-transit")

    result = DeliveryUpdateRecorder(db, None, clock).record_update(shipment.id, driver, _update("delayed", "Detroit, MI"))

    assert result.outcome is UpdateOutcome.RECORDED_AND_TRANSITIONED
    assert result.update.verification_ref is None
