from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    email: str = Field(min_length=3, max_length=254)
    password: str = Field(min_length=8)
    name: str = Field(min_length=1, max_length=120)
    bio: str | None = None
    community_id: int


class LoginRequest(BaseModel):
    email: str
    password: str


class CreateCommunityRequest(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    slug: str = Field(min_length=1, max_length=64, pattern=r"^[a-z0-9-]+$")


class UpdateUserRequest(BaseModel):
    name: str | None = None
    bio: str | None = None
    email: str | None = None
    password: str | None = Field(default=None, min_length=8)


class LikeRequest(BaseModel):
    to_user_id: int


class SendMessageRequest(BaseModel):
    receiver_id: int
    text: str
