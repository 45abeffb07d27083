from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.schemas.report import Dashboard, AdminAnalytics, FacultyAnalytics
from app.schemas.response import APIResponse
from app.schemas.user import UserContext
from app.services.report import report_service
from app.utils import deps

router = APIRouter()


@router.get("/dashboard", response_model=APIResponse[Dashboard])
def get_dashboard(
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    """Summary for the caller's role. Only the matching section is filled in."""
    dashboard = report_service.get_dashboard(db, current_user_context=context)
    return APIResponse(message="Dashboard retrieved successfully", data=dashboard)


@router.get("/admin/analytics", response_model=APIResponse[AdminAnalytics])
def get_admin_analytics(
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    analytics = report_service.get_admin_analytics(db, current_user_context=context)
    return APIResponse(message="Analytics retrieved successfully", data=analytics)


@router.get("/faculty/analytics", response_model=APIResponse[FacultyAnalytics])
def get_faculty_analytics(
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    analytics = report_service.get_faculty_analytics(db, current_user_context=context)
    return APIResponse(message="Analytics retrieved successfully", data=analytics)
