"""Activity router exposing the current user's audit trail."""

import logging
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from personal_blog.database import get_db
from personal_blog.models import Activity, User
from personal_blog.schemas import ActivityPage, ActivityResponse
from personal_blog.auth import get_current_user
from personal_blog.pagination import MAX_PAGE, effective_limit, paginate

# Configure logging
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/activity", tags=["Activity"])


@router.get("", response_model=ActivityPage)
def list_activity(
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: int = Query(10, ge=1),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List the current user's activity records, newest first."""
    limit = effective_limit(limit)
    logger.info(f"Fetching activity for user {current_user.id}: page={page} limit={limit}")

    query = (
        db.query(Activity)
        .filter(Activity.user_id == current_user.id)
        .order_by(Activity.timestamp.desc(), Activity.id.desc())
    )
    total, total_pages, activities = paginate(query, page, limit)

    return ActivityPage(
        total_activities=total,
        current_page=page,
        total_pages=total_pages,
        activities=[ActivityResponse.model_validate(activity) for activity in activities]
    )
