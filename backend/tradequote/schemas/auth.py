from pydantic import BaseModel, Field

class Token(BaseModel):
    access_token: str
    token_type: str

class UserLogin(BaseModel):
    username: str
    password: str

class UserRegister(BaseModel):
    username: str = Field(min_length=3, max_length=64)
    password: str = Field(min_length=6)
    role: str = Field(default="USER", pattern="^(ADMIN|USER)$")

class UserOut(BaseModel):
    id: int
    username: str
    role: str
    company_id: int
