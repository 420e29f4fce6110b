from models.roles import Role, user_roles
from models.users import User
from models.sessions import UserSession

__all__ = ["Role", "user_roles", "User", "UserSession"]
