from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text
from app.db.base import Base


class TeamInvitation(Base):
    """
    Admin-initiated offer for a specific user to join a team.

    status: 'pending', 'accepted' or 'declined'. An expired pending invitation
    is switched to 'declined' the first time it is read.
    """
    __tablename__ = "team_invitations"

    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    invited_user_id = Column(String(128), nullable=False, index=True)
    invited_by = Column(String(128), nullable=False)

    message = Column(Text, default="", nullable=False)
    status = Column(String(20), default="pending", nullable=False, index=True)
    invitation_type = Column(String(30), default="direct", nullable=False)  # 'direct', 'public_profile', 'team_creation'
    response_message = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    responded_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<TeamInvitation(id={self.id}, team_id={self.team_id}, invited_user_id='{self.invited_user_id}', status='{self.status}')>"
