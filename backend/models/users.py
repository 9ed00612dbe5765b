# backend/models/users.py
import uuid

from sqlalchemy import Boolean, Column, Integer, String
from database import Base


def new_user_id() -> str:
    return uuid.uuid4().hex


# Represents a user account with authentication details and access flags
class User(Base):
    __tablename__ = "users"

    # Internal storage key, never exposed through the API
    id = Column(Integer, primary_key=True, index=True)
    # Opaque identifier handed out to clients and carried in tokens
    user_id = Column(String(32), unique=True, nullable=False, index=True, default=new_user_id)

    email = Column(String(250), unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    fname = Column(String(150), nullable=False, default="")
    lname = Column(String(100), nullable=False, default="")
    role = Column(String, nullable=False, default="employee")
    is_admin = Column(Boolean, nullable=False, default=False)
