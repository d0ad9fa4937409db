from sqlalchemy import JSON, Column, DateTime, Index, Integer, String

from .base import Base, now_utc


class ActionLog(Base):
    __tablename__ = 'action_logs'
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    actor_email = Column(String(255), nullable=True)
    actionable_type = Column(String(255), nullable=False)
    actionable_id = Column(String(64), nullable=True)
    status = Column(String(20), nullable=False, default='finished')
    original = Column(JSON, nullable=True)
    changes = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)

    __table_args__ = (
        Index('ix_action_logs_actionable', 'actionable_type', 'actionable_id'),
    )
