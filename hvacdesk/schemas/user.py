from pydantic import BaseModel, EmailStr, Field

from .actor import Role

class UserBase(BaseModel):
	email: EmailStr
	name: str

class UserCreate(UserBase):
	password: str = Field(..., min_length=8, max_length=72)
	role: Role = Role.CLIENT
