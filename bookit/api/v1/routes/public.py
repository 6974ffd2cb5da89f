from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from bookit.db.session import get_db
from bookit.schemas.experience import ExperienceOut, ExperienceDetailOut, experience_out, slot_out
from bookit.services.catalog_service import list_experiences, get_experience_with_slots

router = APIRouter(tags=["public"])


@router.get("/experiences", response_model=list[ExperienceOut])
def get_experiences(search: Optional[str] = None, db: Session = Depends(get_db)):
    """List experiences; `search` matches title, location or description (case-insensitive)."""
    return [experience_out(e) for e in list_experiences(db, search)]


@router.get("/experiences/{experience_id}", response_model=ExperienceDetailOut)
def get_experience(experience_id: str, db: Session = Depends(get_db)):
    """Experience details with its slots for the coming week."""
    experience, slots = get_experience_with_slots(db, experience_id)
    return ExperienceDetailOut(
        **experience_out(experience).model_dump(),
        slots=[slot_out(s) for s in slots],
    )
