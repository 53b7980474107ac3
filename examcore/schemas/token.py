from pydantic import BaseModel

class TokenPayload(BaseModel):
    """Claims read from an externally issued bearer token."""
    user_id: int | None = None
    role_id: int | None = None
    jti: str | None = None
    exp: int | None = None
