import enum

from sqlalchemy import CheckConstraint, Column, Enum, Integer, String, Text
from sqlalchemy.orm import relationship

from catalog.database import Base


class Kingdom(str, enum.Enum):
    ANIMALIA = "Animalia"
    PLANTAE = "Plantae"
    FUNGI = "Fungi"
    PROTISTA = "Protista"
    ARCHAEA = "Archaea"
    BACTERIA = "Bacteria"


class Species(Base):
    """A species record owned by the user who created it."""

    __tablename__ = "species"
    __table_args__ = (
        CheckConstraint("total_population IS NULL OR total_population >= 1", name="ck_species_total_population"),
    )

    id = Column(Integer, primary_key=True, index=True)
    scientific_name = Column(String(200), nullable=False, index=True)
    common_name = Column(String(200), nullable=True)
    kingdom = Column(
        Enum(
            Kingdom,
            name="kingdom",
            values_callable=lambda enum_cls: [e.value for e in enum_cls],
        ),
        nullable=False,
    )
    total_population = Column(Integer, nullable=True)
    image = Column(String(1000), nullable=True)
    description = Column(Text, nullable=True)
    author = Column(String(36), nullable=False, index=True)  # users.id of the owner

    # Relationships
    comments = relationship(
        "Comment",
        back_populates="species",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Species(id={self.id}, scientific_name='{self.scientific_name}')>"
