from enum import Enum


class RoomStatus(str, Enum):

    available = "available"
    occupied = "occupied"
    maintenance = "maintenance"
    cleaning = "cleaning"


class GuestType(str, Enum):

    online = "online"
    walk_in = "walk-in"


class ReservationStatus(str, Enum):

    confirmed = "confirmed"
    checked_in = "checked-in"
    checked_out = "checked-out"
    cancelled = "cancelled"
    no_show = "no-show"


class ReservationPaymentStatus(str, Enum):

    pending = "pending"
    partial = "partial"
    paid = "paid"
    refunded = "refunded"


# Reservations holding the room for their dates
BLOCKING_STATUSES = (
    ReservationStatus.confirmed.value,
    ReservationStatus.checked_in.value,
)

# Reservations that occupied (or will occupy) the room, used for occupancy
OCCUPYING_STATUSES = (
    ReservationStatus.confirmed.value,
    ReservationStatus.checked_in.value,
    ReservationStatus.checked_out.value,
)

FRONT_DESK_DEPARTMENTS = ("Front Office", "Reception", "Management")
