"""
Security utilities for JWT authentication and password hashing.
"""
from datetime import datetime, timedelta
from typing import Optional
import hashlib
import hmac
import secrets
import bcrypt
from jose import JWTError, jwt
from fleetledger.core.config import settings


def _pre_hash_password(password: str) -> bytes:
    """
    Pre-hash password with SHA256 to support passwords longer than 72 bytes.
    Returns bytes (32 bytes) which is well under bcrypt's 72-byte limit.
    """
    return hashlib.sha256(password.encode('utf-8')).digest()


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its bcrypt hash."""
    if not hashed_password:
        return False
    pre_hashed = _pre_hash_password(plain_password)
    # hashed_password is a string starting with $2b$, convert to bytes for bcrypt
    return bcrypt.checkpw(pre_hashed, hashed_password.encode('utf-8'))


def get_password_hash(password: str) -> str:
    """
    Hash a password with bcrypt.
    Pre-hashes with SHA256 first to support passwords longer than 72 bytes.
    """
    pre_hashed = _pre_hash_password(password)
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(pre_hashed, salt)
    return hashed.decode('utf-8')


def generate_salt(length: int = 16) -> str:
    """Random salt as a hex string (legacy account format)."""
    return secrets.token_hex(length)


def legacy_hash_password(password: str, salt: str) -> str:
    """Salted single-round SHA-256 digest used by accounts created before bcrypt."""
    return hashlib.sha256((password + salt).encode('utf-8')).hexdigest()


def verify_legacy_password(password: str, salt: str, stored_hash: str) -> bool:
    """
    Verify a password against a legacy salt/hash pair.
    The digest is sha256(password + salt) as lowercase hex.
    """
    if not salt or not stored_hash:
        return False
    candidate = legacy_hash_password(password, salt)
    return hmac.compare_digest(candidate, stored_hash.lower())


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt


def decode_access_token(token: str) -> Optional[dict]:
    """Decode and verify a JWT token."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return payload
    except JWTError:
        return None
