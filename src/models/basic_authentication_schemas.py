from sqlalchemy.schema import Column
from sqlalchemy.types import String, Uuid
from uuid6 import uuid7

from src.models.schemas import Base


class UserTable(Base):
    __tablename__ = "users"
    user_id = Column(Uuid, primary_key=True, default=uuid7)
    username = Column(String, unique=True, index=True, nullable=False)
    hash_password = Column(String)
    salt = Column(String)
