from pydantic import BaseModel, Field

class RenameUser(BaseModel):
    username: str = Field(min_length=3, max_length=64)

class SupportPasswordReset(BaseModel):
    user_id: int
    new_password: str = Field(min_length=6)

class SupportUserCreate(BaseModel):
    username: str = Field(min_length=3, max_length=64)
    password: str = Field(min_length=6)
    role: str = Field(default="USER", pattern="^(ADMIN|USER)$")

class SignupLinkCreate(BaseModel):
    role: str = Field(default="USER", pattern="^(ADMIN|USER)$")
    expires_in_days: int | None = Field(default=None, ge=1, le=30)
