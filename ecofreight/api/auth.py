from fastapi import APIRouter, Form, HTTPException, Request

from ecofreight.auth_local import create_access_token
from ecofreight.domain.actors import Role

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/token")
async def issue_token(request: Request, username: str = Form(None), role: str = Form(None)):
    """Development login: issue a bearer token for a user id and role."""
    # Accept form fields, JSON body, or query parameters
    if not username:
        try:
            data = await request.json()
        except ValueError:
            data = dict(request.query_params)
        username = data.get("username")
        role = role or data.get("role")
    if not username:
        raise HTTPException(status_code=422, detail="username is required")
    try:
        chosen_role = Role(role or Role.CUSTOMER.value)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Unknown role '{role}'")
    return {
        "access_token": create_access_token(username, chosen_role),
        "token_type": "bearer",
        "role": chosen_role.value,
    }
