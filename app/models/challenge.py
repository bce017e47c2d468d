from sqlalchemy import Boolean, Column, Integer, String
from app.db.base import Base


class Challenge(Base):
    """
    Read-only view of the challenge registry.

    Challenge content is managed elsewhere; this service only consults
    allow_teams and max_team_size when a team is created.
    """
    __tablename__ = "challenges"

    id = Column(String(64), primary_key=True)
    title = Column(String(200), nullable=False)
    allow_teams = Column(Boolean, default=True, nullable=False)
    max_team_size = Column(Integer, default=4, nullable=False)

    def __repr__(self):
        return f"<Challenge(id='{self.id}', allow_teams={self.allow_teams}, max_team_size={self.max_team_size})>"
