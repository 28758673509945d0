"""
Board Member Model
"""
import enum

from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from taskboard.database import Base


class MemberRole(str, enum.Enum):
    ADMIN = "admin"
    EDITOR = "editor"
    VIEWER = "viewer"


class BoardMember(Base):
    __tablename__ = "board_members"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    board_id = Column(String(32), ForeignKey("boards.id"), nullable=False)
    user_id = Column(String(32), ForeignKey("users.id"), nullable=False)
    role = Column(String(50), default=MemberRole.EDITOR.value, nullable=False)  # admin, editor, viewer
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationships
    board = relationship("Board", back_populates="members")
    user = relationship("User", back_populates="board_memberships")

    __table_args__ = (
        UniqueConstraint('board_id', 'user_id', name='unique_board_member'),
    )
