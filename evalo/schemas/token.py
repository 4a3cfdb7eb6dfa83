from pydantic import BaseModel


class TokenPayload(BaseModel):
    """
    Claims this service reads from an auth-provider access token
    """
    sub: str  # Profile ID (the provider's user ID)
