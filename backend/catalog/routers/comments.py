"""Comment API endpoints: list by species, CRUD with author checks."""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from catalog.audit import entity_to_dict, log_change
from catalog.auth import get_current_user, require_author
from catalog.database import get_db
from catalog.models import Comment, Species, User
from catalog.schemas import CommentCreate, CommentResponse, CommentUpdate

logger = logging.getLogger("catalog.comments")

router = APIRouter(prefix="/comments", tags=["comments"])


def _get_comment_or_404(db: Session, comment_id: int) -> Comment:
    comment = db.query(Comment).filter(Comment.commentid == comment_id).first()
    if not comment:
        raise HTTPException(status_code=404, detail="Comment not found")
    return comment


@router.get("", response_model=List[CommentResponse])
def list_comments(
    species_id: int = Query(..., ge=1),
    db: Session = Depends(get_db)
):
    """List the comments of one species, newest first (public)."""
    return db.query(Comment).filter(
        Comment.species_id == species_id
    ).order_by(Comment.time_made.desc(), Comment.commentid.desc()).all()


@router.post("", response_model=CommentResponse, status_code=201)
def create_comment(
    data: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Attach a comment to an existing species. The author is the current user."""
    species = db.query(Species).filter(Species.id == data.species_id).first()
    if not species:
        raise HTTPException(status_code=404, detail="Species not found")

    comment = Comment(
        species_id=data.species_id,
        other_sugs=data.other_sugs,
        author=current_user.id,
    )
    if data.time_made is not None:
        comment.time_made = data.time_made

    try:
        db.add(comment)
        db.flush()
        log_change(
            db, current_user, "comment", comment.commentid, comment.species_id,
            "CREATE", None, entity_to_dict(comment)
        )
        db.commit()
        db.refresh(comment)
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=409, detail=f"Could not create comment: {exc.orig}")
    except Exception:
        db.rollback()
        raise

    logger.info("comment %s added to species %s by %s", comment.commentid, comment.species_id, current_user.id)
    return comment


@router.get("/{comment_id}", response_model=CommentResponse)
def get_comment(comment_id: int, db: Session = Depends(get_db)):
    """Get a single comment (public)."""
    return _get_comment_or_404(db, comment_id)


@router.patch("/{comment_id}", response_model=CommentResponse)
def update_comment(
    comment_id: int,
    data: CommentUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Edit a comment (author only)."""
    comment = _get_comment_or_404(db, comment_id)
    require_author(current_user, comment.author, "comment")

    before = entity_to_dict(comment)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(comment, field, value)

    try:
        db.flush()
        log_change(
            db, current_user, "comment", comment.commentid, comment.species_id,
            "UPDATE", before, entity_to_dict(comment)
        )
        db.commit()
        db.refresh(comment)
    except Exception:
        db.rollback()
        raise

    return comment


@router.delete("/{comment_id}", status_code=204)
def delete_comment(
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete a comment (author only)."""
    comment = _get_comment_or_404(db, comment_id)
    require_author(current_user, comment.author, "comment")

    before = entity_to_dict(comment)

    try:
        db.delete(comment)
        log_change(
            db, current_user, "comment", comment_id, comment.species_id,
            "DELETE", before, None
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    return None
