from sqlalchemy import select, update
from sqlalchemy.orm import Session

from bookit.models.slot import Slot


def get_slot_by_id(db: Session, slot_id: str, for_update: bool = False) -> Slot | None:
    stmt = select(Slot).where(Slot.id == slot_id)
    if for_update:
        # Row lock on PostgreSQL; no-op on SQLite, where the compare-and-set below guards instead.
        stmt = stmt.with_for_update()
    return db.execute(stmt).scalar_one_or_none()


def update_slot_availability(db: Session, slot_id: str, new_available: int, expected: int) -> bool:
    """Compare-and-set ``available_spots`` from ``expected`` to ``new_available``.

    Returns False when another transaction changed the row since it was read.
    """
    if new_available < 0:
        raise ValueError("available_spots cannot go negative")
    result = db.execute(
        update(Slot)
        .where(Slot.id == slot_id, Slot.available_spots == expected)
        .values(available_spots=new_available)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
