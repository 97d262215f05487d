from sqlalchemy import Column, DateTime, String, Text

from .db import Base
from .task_repo_utils import utcnow


class Task(Base):
    __tablename__ = "tasks"

    id = Column(String(24), primary_key=True, index=True)
    title = Column(Text, nullable=False)
    description = Column(String(128), nullable=False)
    status = Column(String(32), nullable=False, default="pending")

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )
