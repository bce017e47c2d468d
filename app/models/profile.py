from sqlalchemy import Column, String
from app.db.base import Base


class PublicProfile(Base):
    """Read-only public profile data owned by the profile directory."""
    __tablename__ = "public_profiles"

    user_id = Column(String(128), primary_key=True)
    name = Column(String(100), nullable=True)
    display_name = Column(String(100), nullable=True)
    email = Column(String(255), nullable=True)
    photo = Column(String(500), nullable=True)
