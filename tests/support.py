import json
from datetime import datetime, timezone

import httpx

FIXED_NOW = datetime(2025, 3, 14, 15, 9, 26, tzinfo=timezone.utc)

CUSTOMER_ID = "customer-1"
OTHER_CUSTOMER_ID = "customer-2"
DRIVER_ID = "driver-1"
OTHER_DRIVER_ID = "driver-2"
MANAGER_ID = "manager-1"


def naive(value: datetime) -> datetime:
    """SQLite hands datetimes back without tzinfo."""
    return value.replace(tzinfo=None)


class VerificationEndpoint:
    """Scripted stand-in for the hosted blockchain-verify function.

    mode is one of: ok, timeout, error, rejected.
    """

    def __init__(self):
        self.mode = "ok"
        self.requests = []
        self._issued = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append(body)
        if self.mode == "timeout":
            raise httpx.ReadTimeout("verification timed out", request=request)
        if self.mode == "error":
            return httpx.Response(500, json={"success": False, "error": "internal"})
        if self.mode == "rejected":
            return httpx.Response(200, json={"success": False, "transactionHash": "", "blockchainRecord": {}})
        if body.get("operation") == "verify":
            return httpx.Response(200, json={
                "verified": True,
                "blockNumber": 14358291,
                "timestamp": "2025-03-14T15:09:26Z",
                "from": "0xA742a6Af8F4D193CEF887D7A932ADc0A3D410D74",
                "to": "0xEC9CaB5E02F0DaE3dE3C1e5A543C79F0B92e8f95",
                "gasUsed": 42688,
                "status": "success",
            })
        self._issued += 1
        return httpx.Response(200, json={
            "success": True,
            "transactionHash": f"0x{self._issued:064x}",
            "blockchainRecord": {"verified": True},
        })
