"""User service - operator accounts and roles"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ...models import AdminUser
from ...shared.listing import paginate
from .schemas import UserCreate, UserUpdate

logger = logging.getLogger(__name__)

ROLES = ("SUPER_ADMIN", "ADMIN", "MANAGER", "STAFF", "CUSTOMER")


class UserService:
    def __init__(self, db: Session):
        self.db = db

    def list_users(
        self,
        search: Optional[str] = None,
        role: Optional[str] = None,
        is_active: Optional[bool] = None,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[AdminUser], dict]:
        query = self.db.query(AdminUser)
        if search:
            term = f"%{search}%"
            query = query.filter(or_(AdminUser.name.ilike(term), AdminUser.email.ilike(term)))
        if role and role != "all":
            query = query.filter(AdminUser.role == role)
        if is_active is not None:
            query = query.filter(AdminUser.is_active.is_(is_active))
        query = query.order_by(AdminUser.created_at.desc(), AdminUser.id.desc())
        return paginate(query, page, limit)

    def get_user(self, user_id: int) -> AdminUser:
        user = self.db.query(AdminUser).filter(AdminUser.id == user_id).first()
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        return user

    def _ensure_unique_email(self, email: str, exclude_id: Optional[int] = None) -> None:
        query = self.db.query(AdminUser).filter(AdminUser.email == email)
        if exclude_id is not None:
            query = query.filter(AdminUser.id != exclude_id)
        if query.first():
            raise HTTPException(status_code=409, detail="A user with this email already exists")

    def _is_last_super_admin(self, user: AdminUser) -> bool:
        if user.role != "SUPER_ADMIN" or not user.is_active:
            return False
        others = (
            self.db.query(AdminUser)
            .filter(
                AdminUser.role == "SUPER_ADMIN",
                AdminUser.is_active.is_(True),
                AdminUser.id != user.id,
            )
            .count()
        )
        return others == 0

    def create_user(self, data: UserCreate) -> AdminUser:
        self._ensure_unique_email(data.email)
        user = AdminUser(**data.model_dump())
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"✅ User {user.email} created with role {user.role}")
        return user

    def update_user(self, user_id: int, data: UserUpdate) -> AdminUser:
        user = self.get_user(user_id)
        updates = data.model_dump(exclude_unset=True)

        if "email" in updates and updates["email"]:
            self._ensure_unique_email(updates["email"], exclude_id=user.id)

        demoted = "role" in updates and updates["role"] != "SUPER_ADMIN"
        deactivated = updates.get("is_active") is False
        if (demoted or deactivated) and self._is_last_super_admin(user):
            raise HTTPException(
                status_code=400, detail="The last active super admin cannot be demoted or deactivated"
            )

        for key, value in updates.items():
            if value is not None:
                setattr(user, key, value)

        self.db.commit()
        self.db.refresh(user)
        logger.info(f"✅ User {user.email} updated")
        return user

    def deactivate_user(self, user_id: int) -> AdminUser:
        user = self.get_user(user_id)
        if self._is_last_super_admin(user):
            raise HTTPException(
                status_code=400, detail="The last active super admin cannot be demoted or deactivated"
            )
        user.is_active = False
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"🚫 User {user.email} deactivated")
        return user

    def get_stats(self) -> dict:
        rows = (
            self.db.query(AdminUser.role, AdminUser.is_active, func.count(AdminUser.id))
            .group_by(AdminUser.role, AdminUser.is_active)
            .all()
        )
        by_role = {role: {"total": 0, "active": 0} for role in ROLES}
        for role, active, count in rows:
            bucket = by_role.setdefault(role, {"total": 0, "active": 0})
            bucket["total"] += count
            if active:
                bucket["active"] += count

        total = sum(b["total"] for b in by_role.values())
        active = sum(b["active"] for b in by_role.values())
        return {"total": total, "active": active, "inactive": total - active, "by_role": by_role}
