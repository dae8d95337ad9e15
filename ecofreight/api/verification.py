"""
Verification lookups, plus a development stand-in for the blockchain-verify
function.

The stand-in returns random 0x-prefixed hashes and a canned verify answer.
It records nothing and proves nothing; it only lets the service run end to
end without the hosted function.
"""

import secrets
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import ValidationError as PydanticValidationError

from ecofreight.domain.actors import Actor
from ecofreight.domain.errors import VerificationUnavailable
from ecofreight.infrastructure.verification import (
    RegisterOperation,
    UpdateOperation,
    VerificationClient,
    VerifyOperation,
    VerifyResult,
    operation_adapter,
)
from .deps import get_current_actor, get_verifier

router = APIRouter(prefix="/verification", tags=["verification"])

@router.get("/{tx_hash}", response_model=VerifyResult, response_model_by_alias=True)
def verify_transaction(
    tx_hash: str,
    verifier: VerificationClient = Depends(get_verifier),
    actor: Actor = Depends(get_current_actor),
):
    try:
        return verifier.verify(tx_hash)
    except VerificationUnavailable as e:
        raise HTTPException(status_code=503, detail=e.detail)


stub_router = APIRouter(prefix="/stub", tags=["verification-stub"], include_in_schema=False)

STUB_FROM_ADDRESS = "0xA742a6Af8F4D193CEF887D7A932ADc0A3D410D74"
STUB_TO_ADDRESS = "0xEC9CaB5E02F0DaE3dE3C1e5A543C79F0B92e8f95"

def random_tx_hash() -> str:
    return "0x" + secrets.token_hex(32)

@stub_router.post("/blockchain-verify")
def blockchain_verify_stub(body: dict = Body(...)):
    try:
        operation = operation_adapter.validate_python(body)
    except PydanticValidationError:
        raise HTTPException(status_code=400, detail="Invalid operation or missing parameters")

    now = datetime.now(timezone.utc).isoformat()
    if isinstance(operation, VerifyOperation):
        return {
            "verified": True,
            "blockNumber": 14358291,
            "timestamp": now,
            "from": STUB_FROM_ADDRESS,
            "to": STUB_TO_ADDRESS,
            "gasUsed": 42688,
            "status": "success",
        }
    if isinstance(operation, RegisterOperation):
        record = {
            "shipmentId": operation.shipment_data.id or str(uuid.uuid4()),
            "timestamp": now,
            "carbonFootprint": operation.shipment_data.carbon_footprint,
            "transportType": operation.shipment_data.transport_type,
            "verified": True,
        }
    else:
        record = {
            "shipmentId": operation.shipment_id,
            "timestamp": now,
            "status": operation.status,
            "metadata": operation.metadata,
            "verified": True,
        }
    return {"success": True, "transactionHash": random_tx_hash(), "blockchainRecord": record}
