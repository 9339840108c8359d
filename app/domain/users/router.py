"""User management router"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import UserCreate, UserResponse, UserUpdate
from .service import UserService

router = APIRouter(prefix="/users", tags=["Users"])


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)


@router.get("")
async def list_users(
    search: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    service: UserService = Depends(get_user_service),
):
    users, pagination = service.list_users(search, role, is_active, page, limit)
    return {"users": [UserResponse.model_validate(u) for u in users], "pagination": pagination}


@router.get("/stats")
async def get_user_stats(service: UserService = Depends(get_user_service)):
    return service.get_stats()


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(data: UserCreate, service: UserService = Depends(get_user_service)):
    return service.create_user(data)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, service: UserService = Depends(get_user_service)):
    return service.get_user(user_id)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int, data: UserUpdate, service: UserService = Depends(get_user_service)
):
    return service.update_user(user_id, data)


@router.delete("/{user_id}", response_model=UserResponse)
async def deactivate_user(user_id: int, service: UserService = Depends(get_user_service)):
    """Soft delete: the account is kept but can no longer be used"""
    return service.deactivate_user(user_id)
