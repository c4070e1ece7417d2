"""
Caller identity utilities - optional JWT decoding for audit attribution.

No route requires a token. When a bearer token is sent it is verified and
its name is recorded as the actor on booking timeline entries.
"""
from datetime import datetime, timedelta
from typing import Optional, Dict
import logging
from jose import JWTError, jwt
from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.config.settings import settings

logger = logging.getLogger(__name__)

# JWT Bearer token, optional
security = HTTPBearer(auto_error=False)

SYSTEM_ACTOR = "System"

def create_access_token(data: Dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token"""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt

def decode_access_token(token: str) -> Dict:
    """Decode and verify a JWT token"""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return payload
    except JWTError as e:
        logger.warning("JWT Verification Failed: %s. Token: %s...", e, token[:20])
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[Dict]:
    """Return the token payload when a bearer token is sent, else None"""
    if credentials is None:
        return None
    return decode_access_token(credentials.credentials)

def actor_name(user: Optional[Dict]) -> str:
    if not user:
        return SYSTEM_ACTOR
    return user.get("name") or user.get("email") or SYSTEM_ACTOR
