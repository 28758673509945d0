"""
Task Model
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON, Table, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from taskboard.database import Base


class TaskPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


task_assignees = Table(
    "task_assignees",
    Base.metadata,
    Column("task_id", String(32), ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", String(32), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Task(Base):
    __tablename__ = "tasks"

    id = Column(String(32), primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    priority = Column(SQLEnum(TaskPriority), default=TaskPriority.MEDIUM, nullable=False)
    due_date = Column(DateTime(timezone=True), nullable=True)
    tags = Column(JSON, default=list, nullable=False)
    column_id = Column(String(32), ForeignKey("board_columns.id"), nullable=False)
    # Denormalized from column.board_id
    board_id = Column(String(32), ForeignKey("boards.id"), nullable=False)
    created_by_id = Column(String(32), ForeignKey("users.id"), nullable=False)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    column = relationship("BoardColumn", back_populates="task_rows")
    board = relationship("Board")
    creator = relationship("User", foreign_keys=[created_by_id])
    assignees = relationship("User", secondary=task_assignees, order_by="User.email")

    __mapper_args__ = {"version_id_col": version}
