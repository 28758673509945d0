"""
Board Column Model
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from taskboard.database import Base


class BoardColumn(Base):
    """A column of a board. Its position comes from ``Board.column_order``."""
    __tablename__ = "board_columns"

    id = Column(String(32), primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    board_id = Column(String(32), ForeignKey("boards.id"), nullable=False)
    # Display order of the column's tasks; must agree with Task.column_id
    task_order = Column(JSON, default=list, nullable=False)
    is_locked = Column(Boolean, default=False, nullable=False)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    board = relationship("Board", back_populates="column_rows")
    task_rows = relationship("Task", back_populates="column", cascade="all, delete-orphan")

    __mapper_args__ = {"version_id_col": version}
