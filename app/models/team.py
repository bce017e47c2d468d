from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, ForeignKey, Boolean, DateTime, Text, JSON
from sqlalchemy.orm import relationship
from app.db.base import Base


class Team(Base):
    """
    A group of users working on one challenge submission.

    current_members mirrors the number of active TeamMember rows and is only
    written by TeamLifecycleService. version is bumped on every UPDATE and
    checked by the ORM, so two writers racing on the same team cannot both
    commit.
    """
    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), index=True, nullable=False)
    description = Column(Text, nullable=True)

    # Challenge binding
    challenge_id = Column(String(64), ForeignKey("challenges.id"), nullable=False, index=True)
    challenge_title = Column(String(200), nullable=False)

    # Capacity
    max_members = Column(Integer, nullable=False)
    current_members = Column(Integer, default=0, nullable=False)

    # Settings
    status = Column(String(20), default="active", nullable=False, index=True)  # 'active', 'inactive', 'closed'
    visibility = Column(String(20), default="public", nullable=False, index=True)  # 'public', 'invite-only'
    joinable_enabled = Column(Boolean, default=False, nullable=False)
    join_code = Column(String(32), unique=True, nullable=True, index=True)
    auto_approve = Column(Boolean, default=False, nullable=False)
    tags = Column(JSON, default=list, nullable=False)

    # Ownership
    created_by = Column(String(128), nullable=False, index=True)
    admins = Column(JSON, default=list, nullable=False)  # user ids with owner/admin role

    # Submission state, written by the submission flow
    has_submitted = Column(Boolean, default=False, nullable=False)
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    submission_url = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))  # settings changes only
    last_activity = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)

    version = Column(Integer, nullable=False)

    # Relationships
    members = relationship("TeamMember", back_populates="team", passive_deletes=True)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<Team(id={self.id}, name='{self.name}', members={self.current_members}/{self.max_members})>"

    @property
    def is_full(self) -> bool:
        return self.current_members >= self.max_members

    @property
    def is_active(self) -> bool:
        return self.status == "active"
