"""Species API endpoints with full CRUD, author checks and audit logging."""
import logging
from datetime import datetime
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from catalog.audit import entity_to_dict, log_change
from catalog.auth import get_current_user, require_author
from catalog.database import get_db
from catalog.models import AuditLog, Species, User
from catalog.schemas import SpeciesCreate, SpeciesResponse, SpeciesUpdate

logger = logging.getLogger("catalog.species")

router = APIRouter(prefix="/species", tags=["species"])


def _get_species_or_404(db: Session, species_id: int) -> Species:
    species = db.query(Species).filter(Species.id == species_id).first()
    if not species:
        raise HTTPException(status_code=404, detail="Species not found")
    return species


@router.get("", response_model=List[SpeciesResponse])
def list_species(db: Session = Depends(get_db)):
    """List all species (public)."""
    return db.query(Species).order_by(Species.id).all()


@router.post("", response_model=SpeciesResponse, status_code=201)
def create_species(
    data: SpeciesCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Create a new species owned by the current user."""
    species = Species(**data.model_dump(), author=current_user.id)

    try:
        db.add(species)
        db.flush()
        log_change(
            db, current_user, "species", species.id, species.id,
            "CREATE", None, entity_to_dict(species)
        )
        db.commit()
        db.refresh(species)
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=409, detail=f"Could not create species: {exc.orig}")
    except Exception:
        db.rollback()
        raise

    logger.info("species %s created by %s", species.id, current_user.id)
    return species


@router.get("/{species_id}", response_model=SpeciesResponse)
def get_species(species_id: int, db: Session = Depends(get_db)):
    """Get a single species (public)."""
    return _get_species_or_404(db, species_id)


@router.patch("/{species_id}", response_model=SpeciesResponse)
def update_species(
    species_id: int,
    data: SpeciesUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Update the given fields of a species (author only)."""
    species = _get_species_or_404(db, species_id)
    require_author(current_user, species.author, "species")

    before = entity_to_dict(species)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(species, field, value)

    try:
        db.flush()
        log_change(
            db, current_user, "species", species.id, species.id,
            "UPDATE", before, entity_to_dict(species)
        )
        db.commit()
        db.refresh(species)
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=409, detail=f"Could not update species: {exc.orig}")
    except Exception:
        db.rollback()
        raise

    return species


@router.delete("/{species_id}", status_code=204)
def delete_species(
    species_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete a species and its comments (author only)."""
    species = _get_species_or_404(db, species_id)
    require_author(current_user, species.author, "species")

    before = entity_to_dict(species)

    try:
        # comments go with the species via the relationship cascade
        db.delete(species)
        log_change(
            db, current_user, "species", species_id, species_id,
            "DELETE", before, None
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("species %s deleted by %s", species_id, current_user.id)
    return None


class AuditEntryResponse(BaseModel):
    id: int
    timestamp: Optional[datetime]
    user_email: Optional[str]
    entity_type: str
    entity_id: int
    action: str
    diff_json: Any

    class Config:
        from_attributes = True


@router.get("/{species_id}/history", response_model=List[AuditEntryResponse])
def get_species_history(
    species_id: int,
    limit: int = Query(default=50, ge=1, le=200),
    db: Session = Depends(get_db)
):
    """Get the audit history for a species and its comments (public).

    History outlives the species, so a deleted species still has entries.
    """
    logs = db.query(AuditLog).options(
        joinedload(AuditLog.user)
    ).filter(
        AuditLog.species_id == species_id
    ).order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).limit(limit).all()

    result = []
    for log in logs:
        result.append({
            "id": log.id,
            "timestamp": log.timestamp,
            "user_email": log.user.email if log.user else None,
            "entity_type": log.entity_type,
            "entity_id": log.entity_id,
            "action": log.action,
            "diff_json": log.diff_json
        })

    return result
