"""
Client for the blockchain-verification function.

Requests are a closed set of operation variants validated before dispatch.
Each attempt is a single POST with a bounded timeout; every failure surfaces
as VerificationUnavailable and callers decide whether to ignore it.
"""

from datetime import datetime
from typing import Annotated, Any, Literal, Optional, Union

import httpx
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError as PydanticValidationError

from ecofreight.core.logging_config import get_logger
from ecofreight.domain.errors import VerificationUnavailable

logger = get_logger(__name__)


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ShipmentData(_Payload):
    id: Optional[str] = None
    transport_type: str = Field(alias="transportType")
    distance_km: Optional[float] = Field(default=None, alias="distanceKm")
    carbon_footprint: Optional[float] = Field(default=None, alias="carbonFootprint")
    origin: Optional[str] = None
    destination: Optional[str] = None


class VerifyOperation(_Payload):
    operation: Literal["verify"] = "verify"
    hash: str = Field(min_length=1)


class RegisterOperation(_Payload):
    operation: Literal["register"] = "register"
    shipment_data: ShipmentData = Field(alias="shipmentData")


class UpdateOperation(_Payload):
    operation: Literal["update"] = "update"
    shipment_id: str = Field(alias="shipmentId", min_length=1)
    status: str
    metadata: dict[str, Any] = Field(default_factory=dict)


VerificationOperation = Annotated[
    Union[VerifyOperation, RegisterOperation, UpdateOperation],
    Field(discriminator="operation"),
]
operation_adapter: TypeAdapter = TypeAdapter(VerificationOperation)


class VerifyResult(_Payload):
    verified: bool
    block_number: int = Field(alias="blockNumber")
    timestamp: datetime
    from_address: str = Field(alias="from")
    to_address: str = Field(alias="to")
    gas_used: int = Field(alias="gasUsed")
    status: str


class TransactionResult(_Payload):
    success: bool
    transaction_hash: str = Field(alias="transactionHash")
    blockchain_record: dict[str, Any] = Field(default_factory=dict, alias="blockchainRecord")


class VerificationClient:
    def __init__(self, url: str, api_key: str = "", timeout: float = 5.0, transport: Optional[httpx.BaseTransport] = None):
        self.url = url
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    def _post(self, operation: Union[VerifyOperation, RegisterOperation, UpdateOperation]) -> dict:
        if not self.enabled:
            raise VerificationUnavailable("Verification service is not configured")
        body = operation.model_dump(by_alias=True, mode="json", exclude_none=True)
        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
            headers["apikey"] = self.api_key
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(self.url, json=body, headers=headers)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPError as e:
            raise VerificationUnavailable(f"{operation.operation} request failed: {e}") from e
        except ValueError as e:
            raise VerificationUnavailable(f"{operation.operation} returned a non-JSON body") from e

    def submit(self, operation: Union[RegisterOperation, UpdateOperation]) -> TransactionResult:
        data = self._post(operation)
        try:
            result = TransactionResult.model_validate(data)
        except PydanticValidationError as e:
            raise VerificationUnavailable(f"{operation.operation} returned an unexpected body") from e
        if not result.success:
            raise VerificationUnavailable(f"{operation.operation} was rejected by the verification service")
        return result

    def verify(self, tx_hash: str) -> VerifyResult:
        data = self._post(VerifyOperation(hash=tx_hash))
        try:
            return VerifyResult.model_validate(data)
        except PydanticValidationError as e:
            raise VerificationUnavailable("verify returned an unexpected body") from e


def try_submit(client: Optional[VerificationClient], operation: Union[RegisterOperation, UpdateOperation]) -> Optional[str]:
    """Attempt one verification and return its transaction hash, or None.

    Never raises for collaborator failures.
    """
    if client is None or not client.enabled:
        logger.info(
            "Verification skipped",
            extra={'extra_fields': {'operation': operation.operation, 'reason': 'disabled'}}
        )
        return None
    try:
        return client.submit(operation).transaction_hash
    except VerificationUnavailable as e:
        logger.warning(
            "Verification unavailable; continuing without reference",
            extra={'extra_fields': {'operation': operation.operation, 'reason': e.detail}}
        )
        return None
