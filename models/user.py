from models.base_model import Base, BaseModel
from models.role import Role
from sqlalchemy import Column, Enum, String
from sqlalchemy.orm import relationship


class User(BaseModel, Base):
    __tablename__ = "users"
    __secret_fields__ = ("password_hash",)

    firstname = Column(String(255), nullable=True)
    lastname = Column(String(255), nullable=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(Enum(Role, name="user_role"), nullable=False, default=Role.USER)

    refresh_tokens = relationship(
        "RefreshToken",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def password(self):
        raise AttributeError("Password: Write-only field")

    @property
    def authorities(self):
        return Role.parse(self.role).authorities

    def __repr__(self):
        return f"<User id={self.id} email={self.email}>"
