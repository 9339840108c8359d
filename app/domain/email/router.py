"""Email admin router - SMTP settings, test sends and templates"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import (
    DefaultTemplateResponse,
    EmailConfigResponse,
    EmailConfigUpdate,
    EmailTemplateCreate,
    EmailTemplateResponse,
    EmailTemplateUpdate,
    EmailTestRequest,
    SendEmailRequest,
)
from .service import EmailAdminService

router = APIRouter(prefix="/admin/email", tags=["Email"])


def get_email_admin_service(db: Session = Depends(get_db)) -> EmailAdminService:
    return EmailAdminService(db)


@router.get("/config", response_model=EmailConfigResponse)
async def get_email_config(service: EmailAdminService = Depends(get_email_admin_service)):
    """Current SMTP settings, password masked"""
    return service.get_config()


@router.put("/config", response_model=EmailConfigResponse)
async def update_email_config(
    data: EmailConfigUpdate, service: EmailAdminService = Depends(get_email_admin_service)
):
    return service.update_config(data)


@router.delete("/config")
async def remove_email_config(service: EmailAdminService = Depends(get_email_admin_service)):
    service.remove_config()
    return {"success": True, "message": "SMTP configuration removed"}


@router.post("/test")
async def test_email_config(
    data: Optional[EmailTestRequest] = None,
    service: EmailAdminService = Depends(get_email_admin_service),
):
    """Verify the SMTP connection, optionally sending a test message"""
    return service.test(data.to if data else None)


@router.post("/send")
async def send_email(
    data: SendEmailRequest, service: EmailAdminService = Depends(get_email_admin_service)
):
    service.send(data)
    return {"success": True, "message": f"Email sent to {data.to}"}


@router.get("/templates", response_model=list[EmailTemplateResponse])
async def list_email_templates(
    type: Optional[str] = Query(None),
    service: EmailAdminService = Depends(get_email_admin_service),
):
    return service.list_templates(type)


@router.get("/templates/defaults", response_model=list[DefaultTemplateResponse])
async def list_default_templates():
    return EmailAdminService.default_templates()


@router.post("/templates", response_model=EmailTemplateResponse, status_code=201)
async def create_email_template(
    data: EmailTemplateCreate, service: EmailAdminService = Depends(get_email_admin_service)
):
    return service.create_template(data)


@router.get("/templates/{template_id}", response_model=EmailTemplateResponse)
async def get_email_template(
    template_id: int, service: EmailAdminService = Depends(get_email_admin_service)
):
    return service.get_template(template_id)


@router.put("/templates/{template_id}", response_model=EmailTemplateResponse)
async def update_email_template(
    template_id: int,
    data: EmailTemplateUpdate,
    service: EmailAdminService = Depends(get_email_admin_service),
):
    return service.update_template(template_id, data)


@router.delete("/templates/{template_id}")
async def delete_email_template(
    template_id: int, service: EmailAdminService = Depends(get_email_admin_service)
):
    service.delete_template(template_id)
    return {"success": True, "message": "Template deleted"}
