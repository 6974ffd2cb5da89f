from pydantic import BaseModel
from typing import List, Optional

class SlotOut(BaseModel):
    id: str
    experienceId: str
    date: str  # YYYY-MM-DD
    time: str
    totalSpots: int
    availableSpots: int

class ExperienceOut(BaseModel):
    id: str
    title: str
    location: str
    description: str
    price: int
    imageUrl: str
    about: Optional[str] = None

class ExperienceDetailOut(ExperienceOut):
    slots: List[SlotOut] = []


def slot_out(s) -> SlotOut:
    return SlotOut(
        id=s.id,
        experienceId=s.experience_id,
        date=s.date.isoformat(),
        time=s.time,
        totalSpots=s.total_spots,
        availableSpots=s.available_spots,
    )


def experience_out(e) -> ExperienceOut:
    return ExperienceOut(
        id=e.id,
        title=e.title,
        location=e.location,
        description=e.description,
        price=e.price,
        imageUrl=e.image_url,
        about=e.about,
    )
