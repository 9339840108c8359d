"""Quality control router"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import (
    ApproveRequest,
    CheckCreate,
    CheckResponse,
    CheckUpdate,
    DefectCreate,
    DefectUpdate,
    ItemUpdate,
    TemplateCreate,
    TemplateResponse,
)
from .service import QualityControlService, to_response

router = APIRouter(prefix="/quality-control", tags=["Quality Control"])


def get_quality_service(db: Session = Depends(get_db)) -> QualityControlService:
    return QualityControlService(db)


@router.get("/templates", response_model=list[TemplateResponse])
async def list_templates(
    category: Optional[str] = Query(None),
    service: QualityControlService = Depends(get_quality_service),
):
    return service.list_templates(category)


@router.post("/templates", response_model=TemplateResponse, status_code=201)
async def create_template(
    data: TemplateCreate, service: QualityControlService = Depends(get_quality_service)
):
    return service.create_template(data)


@router.get("/checks", response_model=list[CheckResponse])
async def list_checks(
    status: Optional[str] = Query(None),
    inspector: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    service: QualityControlService = Depends(get_quality_service),
):
    return [to_response(c) for c in service.list_checks(status, inspector, search)]


@router.post("/checks", response_model=CheckResponse, status_code=201)
async def create_check(
    data: CheckCreate, service: QualityControlService = Depends(get_quality_service)
):
    """Start an inspection from a template and/or explicit checklist items"""
    return to_response(service.create_check(data))


@router.get("/checks/{check_id}", response_model=CheckResponse)
async def get_check(check_id: int, service: QualityControlService = Depends(get_quality_service)):
    return to_response(service.get_check(check_id))


@router.patch("/checks/{check_id}", response_model=CheckResponse)
async def update_check(
    check_id: int,
    data: CheckUpdate,
    service: QualityControlService = Depends(get_quality_service),
):
    return to_response(service.update_check(check_id, data))


@router.patch("/checks/{check_id}/items/{item_id}", response_model=CheckResponse)
async def update_check_item(
    check_id: int,
    item_id: int,
    data: ItemUpdate,
    service: QualityControlService = Depends(get_quality_service),
):
    return to_response(service.update_item(check_id, item_id, data))


@router.post("/checks/{check_id}/defects", response_model=CheckResponse, status_code=201)
async def add_defect(
    check_id: int,
    data: DefectCreate,
    service: QualityControlService = Depends(get_quality_service),
):
    return to_response(service.add_defect(check_id, data))


@router.patch("/checks/{check_id}/defects/{defect_id}", response_model=CheckResponse)
async def update_defect(
    check_id: int,
    defect_id: int,
    data: DefectUpdate,
    service: QualityControlService = Depends(get_quality_service),
):
    return to_response(service.update_defect(check_id, defect_id, data))


@router.post("/checks/{check_id}/approve", response_model=CheckResponse)
async def approve_check(
    check_id: int,
    data: ApproveRequest,
    service: QualityControlService = Depends(get_quality_service),
):
    return to_response(service.approve_check(check_id, data))


@router.get("/stats")
async def get_quality_stats(service: QualityControlService = Depends(get_quality_service)):
    return service.get_stats()
