from .access_code import AccessCode
from .resume import Resume
from .user import Role, User

__all__ = ["AccessCode", "Resume", "Role", "User"]
