"""
Persistence layer: SQLAlchemy models and the DBStorage session wrapper.
The app factory builds one DBStorage and hands it to the services.
"""
from models.base_model import Base
from models.role import Permission, Role
from models.user import User
from models.refresh_token import RefreshToken
from models.db_storage import DBStorage

__all__ = ["Base", "Permission", "Role", "User", "RefreshToken", "DBStorage"]
