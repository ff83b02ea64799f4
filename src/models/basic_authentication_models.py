from uuid import UUID

from pydantic import BaseModel


class UserModel(BaseModel):
    """This class is used to create a user model for basic authentication."""
    user_id: UUID
    username: str
    hash_password: str
    salt: str

    class Config:
        from_attributes = True
