# app/models/__init__.py

from models.user import User
from models.like import Like

__all__ = ["User", "Like"]
