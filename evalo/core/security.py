from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Union

from jose import JWTError, jwt

from evalo.core.config import get_settings
from evalo.core.exceptions import AuthenticationError
from evalo.schemas.token import TokenPayload

settings = get_settings()


def create_access_token(
        subject: Union[str, Any],
        expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a JWT shaped like the ones the auth provider issues

    Used by local tooling and tests; production tokens come from the provider.

    Args:
        subject: Profile ID the token is issued for
        expires_delta: Optional expiration time delta, one hour by default

    Returns:
        str: signed JWT
    """
    expire = datetime.now(tz=timezone.utc) + (expires_delta or timedelta(hours=1))

    to_encode = {"exp": expire, "sub": str(subject)}
    if settings.AUTH_JWT_AUDIENCE:
        to_encode["aud"] = settings.AUTH_JWT_AUDIENCE

    return jwt.encode(
        to_encode,
        settings.AUTH_JWT_SECRET,
        algorithm=settings.AUTH_JWT_ALGORITHM
    )


def decode_access_token(token: str) -> TokenPayload:
    """
    Verify a provider-issued access token and extract its subject

    Raises:
        AuthenticationError: signature, expiry, audience or subject invalid
    """
    options = {"verify_aud": bool(settings.AUTH_JWT_AUDIENCE)}
    try:
        payload = jwt.decode(
            token,
            settings.AUTH_JWT_SECRET,
            algorithms=[settings.AUTH_JWT_ALGORITHM],
            audience=settings.AUTH_JWT_AUDIENCE,
            options=options,
        )
    except JWTError as e:
        raise AuthenticationError(f"Could not validate credentials: {e}", "INVALID_TOKEN")

    subject = payload.get("sub")
    if not subject:
        raise AuthenticationError("Token has no subject", "INVALID_TOKEN")

    return TokenPayload(sub=subject)
