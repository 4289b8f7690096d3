# app/core/auth.py
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from app.config import settings

reusable_oauth2 = HTTPBearer()

async def get_current_owner(
    token: HTTPAuthorizationCredentials = Depends(reusable_oauth2)
) -> str:
    """Owner id of the caller, taken from the token subject."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(
            token.credentials,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
        owner_id = payload.get("sub")
        if not owner_id:
            raise credentials_exception
    except JWTError:
        raise credentials_exception
    return str(owner_id)
