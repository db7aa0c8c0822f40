from pydantic import BaseModel, Field

class InviteCreate(BaseModel):
    role: str = Field(default="USER", pattern="^(ADMIN|USER)$")
    expires_in_days: int | None = Field(default=None, ge=1, le=30)

class InviteSignup(BaseModel):
    username: str = Field(min_length=3, max_length=64)
    password: str = Field(min_length=6)
