from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime
from app.db.base import Base


class TeamChallenge(Base):
    """Participation record of a team in its challenge."""
    __tablename__ = "team_challenges"

    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), primary_key=True)
    challenge_id = Column(String(64), primary_key=True)
    status = Column(String(20), default="active", nullable=False)  # 'active', 'completed', 'withdrawn'
    joined_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
