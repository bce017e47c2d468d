from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime
from app.db.base import Base


class UserTeam(Base):
    """
    Reverse index: one row per (user, team) active membership.

    Answers "which teams is this user in" without scanning teams. Written only
    next to the matching TeamMember row, in the same transaction.
    """
    __tablename__ = "user_teams"

    user_id = Column(String(128), primary_key=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), primary_key=True, index=True)
    role = Column(String(20), nullable=False)
    status = Column(String(20), default="active", nullable=False)
    joined_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)

    def __repr__(self):
        return f"<UserTeam(user_id='{self.user_id}', team_id={self.team_id}, role='{self.role}')>"
