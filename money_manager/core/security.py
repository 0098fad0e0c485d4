from datetime import timedelta
from typing import Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from money_manager.core.config import ACCESS_TOKEN_EXPIRE_MINUTES, ALGORITHM, SECRET_KEY
from money_manager.core.errors import Unauthorized
from money_manager.utils.time_helpers import utcnow

SCOPE_FULL = "full"
SCOPE_SHARED = "shared"

# Manejo de contraseñas
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# OAuth2 esquema para login
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")
# Lecturas permisivas: sin token devuelven vacío en lugar de 401
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password):
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    to_encode.setdefault("scope", SCOPE_FULL)
    expire = utcnow() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: Optional[str]) -> dict:
    """Return the claims of a valid token, with ``sub`` parsed to a UUID."""
    if not token:
        raise Unauthorized("Not authenticated")
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        user_id_str = payload.get("sub")
        if user_id_str is None:
            raise Unauthorized("Invalid token")
        payload["sub"] = UUID(user_id_str)
    except (JWTError, ValueError):
        raise Unauthorized("Invalid token")
    return payload


def get_token_claims(token: str = Depends(oauth2_scheme)) -> dict:
    claims = decode_token(token)
    if claims.get("scope", SCOPE_FULL) != SCOPE_FULL:
        raise Unauthorized("Invalid token")
    return claims


def get_current_user(claims: dict = Depends(get_token_claims)) -> UUID:
    return claims["sub"]


def get_optional_user(token: Optional[str] = Depends(optional_oauth2_scheme)) -> Optional[UUID]:
    if not token:
        return None
    try:
        claims = decode_token(token)
    except Unauthorized:
        return None
    if claims.get("scope", SCOPE_FULL) != SCOPE_FULL:
        return None
    return claims["sub"]


def get_shared_owner(token: str = Depends(oauth2_scheme)) -> UUID:
    """Owner id behind a read-only share-link token."""
    claims = decode_token(token)
    if claims.get("scope") != SCOPE_SHARED:
        raise Unauthorized("Invalid share token")
    return claims["sub"]
