from functools import lru_cache
from typing import Callable

from fastapi import Depends, HTTPException, Request

from ecofreight.auth_local import decode_access_token
from ecofreight.core.logging_config import set_request_context
from ecofreight.core_settings import get_settings
from ecofreight.domain.actors import Actor, Role
from ecofreight.infrastructure.verification import VerificationClient

BEARER_PREFIX = "Bearer "

@lru_cache
def get_verifier() -> VerificationClient:
    settings = get_settings()
    return VerificationClient(
        url=settings.VERIFICATION_URL,
        api_key=settings.VERIFICATION_API_KEY,
        timeout=settings.VERIFICATION_TIMEOUT_SECONDS,
    )

async def get_current_actor(request: Request) -> Actor:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith(BEARER_PREFIX):
        raise HTTPException(status_code=401, detail="Missing token")
    token_data = decode_access_token(auth_header[len(BEARER_PREFIX):])
    if not token_data or not token_data.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid token")
    try:
        role = Role(token_data.get("role"))
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid token role")
    set_request_context(user_id=token_data["sub"])
    return Actor(user_id=token_data["sub"], role=role)

def require_roles(*roles: Role) -> Callable[..., Actor]:
    def dependency(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role not in roles:
            raise HTTPException(status_code=403, detail=f"Requires role: {', '.join(r.value for r in roles)}")
        return actor
    return dependency
