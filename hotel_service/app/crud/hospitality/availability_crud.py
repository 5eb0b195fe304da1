from datetime import date, timedelta
from typing import Dict, List, Optional
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ...enum.hospitality_enum import BLOCKING_STATUSES, OCCUPYING_STATUSES
from ...models.hospitality.reservations import Reservation
from ...models.hospitality.rooms import Room


def overlap_filters(check_in: date, check_out: date, statuses=BLOCKING_STATUSES) -> list:
    # [check_in, check_out) intersects an existing stay
    return [
        Reservation.status.in_(statuses),
        Reservation.check_in_date < check_out,
        Reservation.check_out_date > check_in,
    ]


def unavailable_room_ids_query(check_in: date, check_out: date):
    return select(Reservation.room_id).where(*overlap_filters(check_in, check_out))


def find_conflicting_reservation(
    db: Session,
    room_id: int,
    check_in: date,
    check_out: date,
    exclude_id: Optional[int] = None
) -> Optional[Reservation]:
    query = db.query(Reservation).filter(
        Reservation.room_id == room_id,
        *overlap_filters(check_in, check_out)
    )
    if exclude_id:
        query = query.filter(Reservation.id != exclude_id)
    return query.first()


def count_active_rooms(db: Session) -> int:
    return db.query(func.count(Room.id)).filter(Room.is_active == True).scalar() or 0


def date_range(start: date, end: date):
    """Inclusive day iterator."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def occupancy_rate(occupied: int, total: int) -> float:
    return round(occupied * 100.0 / total, 2) if total else 0.0


def occupancy_series(db: Session, start: date, end: date) -> List[Dict]:
    """Occupied room count and rate per night between start and end (inclusive)."""
    total_rooms = count_active_rooms(db)
    stays = (
        db.query(Reservation.room_id, Reservation.check_in_date, Reservation.check_out_date)
        .filter(*overlap_filters(start, end + timedelta(days=1), OCCUPYING_STATUSES))
        .all()
    )

    series = []
    for day in date_range(start, end):
        occupied = len({
            room_id for room_id, check_in, check_out in stays
            if check_in <= day < check_out
        })
        series.append({
            "day": day,
            "occupied_rooms": occupied,
            "total_rooms": total_rooms,
            "occupancy_rate": occupancy_rate(occupied, total_rooms),
        })
    return series


def average_rate(series: List[Dict]) -> float:
    if not series:
        return 0.0
    return round(sum(row["occupancy_rate"] for row in series) / len(series), 2)
