"""
Report & Comment API Endpoints
==============================

FastAPI router for reports (create, list, status triage, delete) and their
comments. Mounted under /api by `create_app`.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .auth import Action, AuthContext
from .db.models import Category, Comment, District, Neighborhood, Report, ReportStatus
from .dependencies import check_actor_claim, get_current_user, get_db, get_image_store
from .errors import NotFound, ValidationFailed
from .queries import get_comment_row, get_report_row, list_comments, list_reports
from .schemas import ActorClaim, CommentCreateRequest, StatusUpdateRequest
from .uploads import ImageStore
from .validation import clean_text, is_blank, parse_coordinates, parse_id, parse_status, require_fields

logger = logging.getLogger(__name__)

router = APIRouter(tags=["reports"])

MAX_COMMENT_LENGTH = 2000


def _load_report(db: Session, report_id: int) -> Report:
    report = db.get(Report, report_id)
    if not report:
        raise NotFound("Report not found.")
    return report


# =============================================================================
# REPORT QUERIES
# =============================================================================

@router.get("/reports")
async def get_reports(
    status: Optional[str] = Query(None),
    district_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """All reports, newest first (optionally filtered by status/district)"""
    status_filter = parse_status(status).value if not is_blank(status) else None
    return {
        "message": "success",
        "data": list_reports(db, status=status_filter, district_id=parse_id(district_id, "district_id")),
    }


@router.get("/reports/category/{category_id}")
async def get_reports_by_category(category_id: int, db: Session = Depends(get_db)):
    return {"message": "success", "data": list_reports(db, category_id=category_id)}


@router.get("/reports/{report_id}")
async def get_report(report_id: int, db: Session = Depends(get_db)):
    row = get_report_row(db, report_id)
    if not row:
        raise NotFound("Report not found.")
    return {"message": "success", "data": row}


# =============================================================================
# REPORT CREATION
# =============================================================================

@router.post("/reports", status_code=201)
async def create_report(
    category_id: Optional[str] = Form(None),
    district_id: Optional[str] = Form(None),
    neighborhood_id: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    latitude: Optional[str] = Form(None),
    longitude: Optional[str] = Form(None),
    user_id: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    auth: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db),
    images: ImageStore = Depends(get_image_store),
):
    """
    Create a report from a multipart form.

    Validation runs fully before anything is written; the photo is stored only
    once all references have been verified.
    """
    auth.require(Action.CREATE_REPORT)
    check_actor_claim(auth, user_id)

    require_fields(
        {"category_id": category_id, "district_id": district_id, "address": address, "description": description},
        ["category_id", "district_id", "address", "description"],
        "Missing required fields: category_id, district_id, address, description.",
    )
    parsed_category_id = parse_id(category_id, "category_id")
    parsed_district_id = parse_id(district_id, "district_id")
    parsed_neighborhood_id = parse_id(neighborhood_id, "neighborhood_id")
    lat, lon = parse_coordinates(latitude, longitude)

    image_data = None
    if image is not None and image.filename:
        image_data = await images.read_upload(image)

    if not db.get(Category, parsed_category_id):
        raise NotFound("Category not found.")
    if not db.get(District, parsed_district_id):
        raise NotFound("District not found.")
    if parsed_neighborhood_id is not None:
        neighborhood = db.get(Neighborhood, parsed_neighborhood_id)
        if not neighborhood or neighborhood.district_id != parsed_district_id:
            raise NotFound("Neighborhood not found or does not belong to the specified district.")

    stored = images.save(image_data, image.filename, image.content_type) if image_data is not None else None

    report = Report(
        category_id=parsed_category_id,
        district_id=parsed_district_id,
        neighborhood_id=parsed_neighborhood_id,
        address=clean_text(address),
        description=clean_text(description),
        latitude=lat,
        longitude=lon,
        image_path=stored.relative_path if stored else None,
        status=ReportStatus.OPEN.value,
        user_id=auth.user_id,
    )
    try:
        db.add(report)
        db.commit()
    except IntegrityError as e:
        # A referenced row vanished between the checks and the insert.
        db.rollback()
        if stored:
            images.delete(stored.relative_path)
        logger.warning(f"Report insert rejected by storage constraints: {e.orig}")
        raise NotFound("Category, district or neighborhood no longer exists.")
    except SQLAlchemyError:
        db.rollback()
        if stored:
            images.delete(stored.relative_path)
        raise

    logger.info(f"Report {report.id} created by user {auth.user_id}")

    row = get_report_row(db, report.id)
    if not row:
        raise HTTPException(status_code=500, detail="Report created, but failed to fetch details.")
    return {"message": "success", "data": row}


# =============================================================================
# STATUS & DELETION
# =============================================================================

@router.put("/reports/{report_id}/status")
async def update_report_status(
    report_id: int,
    request: Optional[StatusUpdateRequest] = None,
    auth: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Government-only status triage"""
    request = request or StatusUpdateRequest()
    new_status = parse_status(request.status)
    check_actor_claim(auth, request.user_id, request.user_role)
    auth.require(Action.UPDATE_REPORT_STATUS)

    report = _load_report(db, report_id)
    report.status = new_status.value
    # stamped even when the status is unchanged
    report.updated_at = datetime.utcnow()
    db.commit()

    logger.info(f"Report {report_id} status set to {new_status.value} by user {auth.user_id}")
    return {"message": "success", "data": {"id": report_id, "status": new_status.value}}


@router.delete("/reports/{report_id}")
async def delete_report(
    report_id: int,
    request: Optional[ActorClaim] = None,
    auth: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db),
    images: ImageStore = Depends(get_image_store),
):
    """Owner or government may delete; comments go with the report"""
    request = request or ActorClaim()
    check_actor_claim(auth, request.user_id, request.user_role)

    report = _load_report(db, report_id)
    auth.require(Action.DELETE_REPORT, owner_id=report.user_id)
    image_path = report.image_path

    deleted = db.query(Report).filter(Report.id == report_id).delete(synchronize_session=False)
    db.commit()
    if deleted == 0:
        raise NotFound("Report not found.")

    if image_path:
        images.delete(image_path)

    logger.info(f"Report {report_id} deleted by user {auth.user_id}")
    return {"message": "deleted", "data": {"id": report_id, "deleted": True}}


# =============================================================================
# COMMENTS
# =============================================================================

@router.get("/reports/{report_id}/comments")
async def get_comments(report_id: int, db: Session = Depends(get_db)):
    """Comments of a report, oldest first"""
    _load_report(db, report_id)
    return {"message": "success", "data": list_comments(db, report_id)}


@router.post("/reports/{report_id}/comments", status_code=201)
async def create_comment(
    report_id: int,
    request: Optional[CommentCreateRequest] = None,
    auth: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    request = request or CommentCreateRequest()
    content = clean_text(request.content)
    if not content:
        raise ValidationFailed("Comment content cannot be empty.")
    if len(content) > MAX_COMMENT_LENGTH:
        raise ValidationFailed(f"Comment is too long (max {MAX_COMMENT_LENGTH} characters).")
    check_actor_claim(auth, request.user_id)
    auth.require(Action.CREATE_COMMENT)

    _load_report(db, report_id)

    comment = Comment(report_id=report_id, user_id=auth.user_id, content=content)
    try:
        db.add(comment)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Comment insert rejected by storage constraints: {e.orig}")
        raise NotFound("Report not found.")

    row = get_comment_row(db, comment.id)
    if not row:
        raise HTTPException(status_code=500, detail="Comment created, but failed to fetch details.")
    return {"message": "success", "data": row}


@router.delete("/comments/{comment_id}")
async def delete_comment(
    comment_id: int,
    request: Optional[ActorClaim] = None,
    auth: AuthContext = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Comment author or government may delete"""
    request = request or ActorClaim()
    check_actor_claim(auth, request.user_id, request.user_role)

    comment = db.get(Comment, comment_id)
    if not comment:
        raise NotFound("Comment not found.")
    auth.require(Action.DELETE_COMMENT, owner_id=comment.user_id)

    deleted = db.query(Comment).filter(Comment.id == comment_id).delete(synchronize_session=False)
    db.commit()
    if deleted == 0:
        raise NotFound("Comment not found.")

    logger.info(f"Comment {comment_id} deleted by user {auth.user_id}")
    return {"message": "deleted", "data": {"id": comment_id, "deleted": True}}
