from typing import Dict, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from shared.core.schemas import Lookup, Pagination, UserToken
from shared.helpers.audit_helper import log_change, snapshot
from shared.models.roles import Roles
from shared.models.users import Users
from shared.utils.enums import AuditAction
from ..schemas.roleschemas import RoleCreate, RoleOut, RoleRequest, RoleUpdate


class RoleInUseError(Exception):
    """Role still has users assigned."""


def _role_out(db: Session, role: Roles) -> RoleOut:
    user_count = db.query(func.count(Users.id)).filter(Users.role_id == role.id).scalar() or 0
    return RoleOut(
        id=role.id,
        name=role.name,
        description=role.description,
        permissions=list(role.permissions or []),
        user_count=user_count,
        created_at=role.created_at,
    )


def get_role_by_id(db: Session, role_id: int) -> Optional[Roles]:
    return db.query(Roles).filter(Roles.id == role_id).first()


def _ensure_unique_name(db: Session, name: str, exclude_id: Optional[int] = None):
    query = db.query(Roles).filter(func.lower(Roles.name) == name.lower())
    if exclude_id:
        query = query.filter(Roles.id != exclude_id)
    if query.first():
        raise ValueError(f"Role with name '{name}' already exists")


def get_roles(db: Session, params: RoleRequest) -> Dict:
    query = db.query(Roles)
    if params.search:
        search_term = f"%{params.search}%"
        query = query.filter(Roles.name.ilike(search_term) | Roles.description.ilike(search_term))

    total = query.with_entities(func.count(Roles.id)).scalar()
    roles = query.order_by(Roles.name.asc()).offset(params.skip).limit(params.take).all()

    return {
        "roles": [_role_out(db, role) for role in roles],
        "pagination": Pagination.build(params, total),
    }


def get_role(db: Session, role_id: int) -> Optional[RoleOut]:
    role = get_role_by_id(db, role_id)
    if not role:
        return None
    return _role_out(db, role)


def get_role_lookup(db: Session) -> List[Lookup]:
    rows = db.query(Roles.id, Roles.name).order_by(Roles.name.asc()).all()
    return [Lookup(id=r.id, name=r.name) for r in rows]


def create_role(db: Session, role: RoleCreate, current_user: UserToken, request_meta: dict) -> RoleOut:
    _ensure_unique_name(db, role.name)

    db_role = Roles(**role.model_dump())
    db.add(db_role)
    db.flush()

    log_change(db, "roles", db_role.id, AuditAction.INSERT, new_values=snapshot(db_role),
               user_id=current_user.user_id, request_meta=request_meta)
    db.commit()
    db.refresh(db_role)
    return _role_out(db, db_role)


def update_role(db: Session, role_id: int, role: RoleUpdate,
                current_user: UserToken, request_meta: dict) -> Optional[RoleOut]:
    db_role = get_role_by_id(db, role_id)
    if not db_role:
        return None

    update_data = role.model_dump(exclude_unset=True)
    if update_data.get("name") and update_data["name"] != db_role.name:
        _ensure_unique_name(db, update_data["name"], exclude_id=role_id)

    old_values = snapshot(db_role)
    for key, value in update_data.items():
        setattr(db_role, key, value)
    db.flush()

    log_change(db, "roles", role_id, AuditAction.UPDATE, old_values=old_values,
               new_values=snapshot(db_role), user_id=current_user.user_id,
               request_meta=request_meta)
    db.commit()
    db.refresh(db_role)
    return _role_out(db, db_role)


def delete_role(db: Session, role_id: int, current_user: UserToken, request_meta: dict) -> bool:
    db_role = get_role_by_id(db, role_id)
    if not db_role:
        return False

    user_count = db.query(func.count(Users.id)).filter(Users.role_id == role_id).scalar() or 0
    if user_count:
        raise RoleInUseError(f"Cannot delete role with {user_count} assigned user(s)")

    old_values = snapshot(db_role)
    db.delete(db_role)
    log_change(db, "roles", role_id, AuditAction.DELETE, old_values=old_values,
               user_id=current_user.user_id, request_meta=request_meta)
    db.commit()
    return True
