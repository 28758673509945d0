"""
Board Model
"""
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from taskboard.database import Base


class Board(Base):
    __tablename__ = "boards"

    id = Column(String(32), primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    owner_id = Column(String(32), ForeignKey("users.id"), nullable=False)
    # Display order of the board's columns; the only authority for it
    column_order = Column(JSON, default=list, nullable=False)
    tags = Column(JSON, default=list, nullable=False)
    is_favorite = Column(Boolean, default=False, nullable=False)
    locked_columns = Column(Boolean, default=False, nullable=False)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    owner = relationship("User", back_populates="owned_boards", foreign_keys=[owner_id])
    members = relationship("BoardMember", back_populates="board", cascade="all, delete-orphan")
    column_rows = relationship("BoardColumn", back_populates="board", cascade="all, delete-orphan")

    __mapper_args__ = {"version_id_col": version}
