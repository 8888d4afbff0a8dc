"""
RefreshToken model: opaque refresh tokens persisted so they can be revoked and rotated
Fields:
- token (unique) - random url-safe string handed to the client
- user_id (Integer) - FK to users.id, cascades on user delete
- revoked (bool) - soft revocation, rows are kept for audit
- expiry_date, created_at, updated_at
"""
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from models.base_model import Base, BaseModel


class RefreshToken(BaseModel, Base):
    __tablename__ = "refresh_tokens"
    __secret_fields__ = ("token",)

    token = Column(String(128), nullable=False, unique=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    revoked = Column(Boolean, default=False, nullable=False)
    expiry_date = Column(DateTime(timezone=True), nullable=False)

    user = relationship("User", back_populates="refresh_tokens")

    def __repr__(self):
        return f"<RefreshToken id={self.id} user_id={self.user_id} revoked={self.revoked}>"
