from datetime import datetime, timezone
from sqlalchemy import Boolean, Column, Integer, String, ForeignKey, DateTime, Text
from app.db.base import Base


class TeamApplication(Base):
    """
    User-initiated request to join a team.

    Reviewed applications are history and never change again. reviewed_by is
    NULL for applications accepted automatically by an auto-approve team.
    """
    __tablename__ = "team_applications"

    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    applicant_id = Column(String(128), nullable=False, index=True)

    message = Column(Text, default="", nullable=False)
    status = Column(String(20), default="pending", nullable=False, index=True)  # 'pending', 'accepted', 'declined'
    via_join_link = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    reviewed_by = Column(String(128), nullable=True)

    def __repr__(self):
        return f"<TeamApplication(id={self.id}, team_id={self.team_id}, applicant_id='{self.applicant_id}', status='{self.status}')>"
