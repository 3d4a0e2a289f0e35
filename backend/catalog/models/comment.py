from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from catalog.database import Base


class Comment(Base):
    """A comment attached to exactly one species."""

    __tablename__ = "comments"

    commentid = Column(Integer, primary_key=True, index=True)
    species_id = Column(Integer, ForeignKey("species.id", ondelete="CASCADE"), nullable=False, index=True)
    time_made = Column(DateTime(timezone=True), nullable=True, server_default=func.now())
    other_sugs = Column(Text, nullable=False, default="")
    author = Column(String(36), nullable=True, index=True)

    # Relationships
    species = relationship("Species", back_populates="comments")

    def __repr__(self):
        return f"<Comment(commentid={self.commentid}, species_id={self.species_id})>"
