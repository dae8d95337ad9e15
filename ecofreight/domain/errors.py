"""Domain errors. The API layer maps each class to an HTTP status."""


class EcoFreightError(Exception):
    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(EcoFreightError):
    """A required field is missing or a value is out of range. Nothing was written."""


class NotFound(EcoFreightError):
    pass


class InvalidTransition(EcoFreightError):
    """The requested status change is not an edge of the lifecycle."""

    def __init__(self, current: str, requested: str):
        super().__init__(f"Cannot change shipment status from '{current}' to '{requested}'")
        self.current = current
        self.requested = requested


class NotEligible(EcoFreightError):
    """The acting user may not perform this action on this shipment."""


class PersistenceError(EcoFreightError):
    pass


class VerificationUnavailable(EcoFreightError):
    """The verification collaborator could not be reached or refused the request."""
