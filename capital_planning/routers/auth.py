# capital_planning/routers/auth.py

import os

from fastapi import Header, HTTPException
from jose import jwt, JWTError

ALGORITHM = "HS256"


def get_current_user_id(authorization: str = Header(None)) -> str:
    if not authorization:
        raise HTTPException(401, "Authorization header missing")
    try:
        scheme, token = authorization.split()
        payload = jwt.decode(
            token,
            os.getenv("SUPABASE_JWT_SECRET"),
            algorithms=[ALGORITHM],
            options={"verify_aud": False},
        )
    except (ValueError, JWTError):
        raise HTTPException(401, "Invalid token")

    if scheme.lower() != "bearer" or not payload.get("sub"):
        raise HTTPException(401, "Invalid token")
    return payload["sub"]
