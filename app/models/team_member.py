from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from app.db.base import Base


class TeamMember(Base):
    """
    Membership ledger row linking a user to a team.

    Attributes:
        user_id: Id issued by the identity provider
        role: 'owner', 'admin' or 'member'
        status: 'active'
    """
    __tablename__ = "team_members"

    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(128), nullable=False, index=True)

    role = Column(String(20), nullable=False)
    status = Column(String(20), default="active", nullable=False)

    # Audit fields
    invited_by = Column(String(128), nullable=True)
    joined_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # Relationships
    team = relationship("Team", back_populates="members")

    __table_args__ = (
        UniqueConstraint('team_id', 'user_id', name='uq_team_member'),
    )

    def __repr__(self):
        return f"<TeamMember(team_id={self.team_id}, user_id='{self.user_id}', role='{self.role}')>"

    @property
    def is_owner(self) -> bool:
        return self.role == "owner"
