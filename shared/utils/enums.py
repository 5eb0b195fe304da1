from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    RECEPTIONIST = "receptionist"
    GUEST = "guest"


STAFF_ROLES = (UserRole.ADMIN.value, UserRole.RECEPTIONIST.value)


class Permission(str, Enum):
    ALL = "*"
    MANAGE_GUESTS = "manage_guests"
    MANAGE_RESERVATIONS = "manage_reservations"
    PROCESS_PAYMENTS = "process_payments"
    VIEW_REPORTS = "view_reports"
    VIEW_OWN_PROFILE = "view_own_profile"
    MAKE_RESERVATIONS = "make_reservations"
    VIEW_OWN_RESERVATIONS = "view_own_reservations"


DEFAULT_ROLE_PERMISSIONS = {
    UserRole.ADMIN.value: [Permission.ALL.value],
    UserRole.RECEPTIONIST.value: [
        Permission.MANAGE_GUESTS.value,
        Permission.MANAGE_RESERVATIONS.value,
        Permission.PROCESS_PAYMENTS.value,
        Permission.VIEW_REPORTS.value,
    ],
    UserRole.GUEST.value: [
        Permission.VIEW_OWN_PROFILE.value,
        Permission.MAKE_RESERVATIONS.value,
        Permission.VIEW_OWN_RESERVATIONS.value,
    ],
}


class AuditAction(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
