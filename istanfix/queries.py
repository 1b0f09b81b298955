"""
Read projections.

Reports and comments are returned as "enriched rows": the row's own columns
plus human-readable names from the related tables, ready for display.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .db.models import Category, Comment, District, Neighborhood, Report, User


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


# =============================================================================
# REFERENCE DATA
# =============================================================================

def list_categories(db: Session) -> List[Dict[str, Any]]:
    return [
        {"id": c.id, "name": c.name, "icon": c.icon, "description": c.description}
        for c in db.query(Category).order_by(Category.id.asc()).all()
    ]


def list_districts(db: Session) -> List[Dict[str, Any]]:
    return [
        {"id": d.id, "name": d.name, "area_code": d.area_code}
        for d in db.query(District).order_by(District.name.asc()).all()
    ]


def list_neighborhoods(db: Session, district_id: Optional[int] = None) -> List[Dict[str, Any]]:
    query = (
        db.query(Neighborhood, District.name.label("district_name"))
        .join(District, Neighborhood.district_id == District.id)
    )
    if district_id is not None:
        query = query.filter(Neighborhood.district_id == district_id)

    return [
        {
            "id": n.id,
            "name": n.name,
            "district_id": n.district_id,
            "district_name": district_name,
            "postal_code": n.postal_code,
        }
        for n, district_name in query.order_by(District.name.asc(), Neighborhood.name.asc()).all()
    ]


# =============================================================================
# REPORTS
# =============================================================================

def _report_query(db: Session):
    comment_count = (
        select(func.count(Comment.id))
        .where(Comment.report_id == Report.id)
        .correlate(Report)
        .scalar_subquery()
        .label("comment_count")
    )
    return (
        db.query(
            Report,
            User.name.label("user_name"),
            Category.name.label("category_name"),
            Category.icon.label("category_icon"),
            District.name.label("district_name"),
            Neighborhood.name.label("neighborhood_name"),
            comment_count,
        )
        .join(Category, Report.category_id == Category.id)
        .join(District, Report.district_id == District.id)
        .outerjoin(Neighborhood, Report.neighborhood_id == Neighborhood.id)
        .outerjoin(User, Report.user_id == User.id)
    )


def _report_row(row) -> Dict[str, Any]:
    report = row.Report
    return {
        "id": report.id,
        "category_id": report.category_id,
        "category_name": row.category_name,
        "category_icon": row.category_icon,
        "district_id": report.district_id,
        "district_name": row.district_name,
        "neighborhood_id": report.neighborhood_id,
        "neighborhood_name": row.neighborhood_name,
        "address": report.address,
        "description": report.description,
        "latitude": report.latitude,
        "longitude": report.longitude,
        "image_path": report.image_path,
        "status": report.status,
        "user_id": report.user_id,
        "user_name": row.user_name,
        "comment_count": row.comment_count or 0,
        "created_at": _iso(report.created_at),
        "updated_at": _iso(report.updated_at),
    }


def list_reports(
    db: Session,
    category_id: Optional[int] = None,
    status: Optional[str] = None,
    district_id: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """Enriched reports, newest first"""
    query = _report_query(db)
    if category_id is not None:
        query = query.filter(Report.category_id == category_id)
    if status is not None:
        query = query.filter(Report.status == status)
    if district_id is not None:
        query = query.filter(Report.district_id == district_id)

    rows = query.order_by(Report.created_at.desc(), Report.id.desc()).all()
    return [_report_row(row) for row in rows]


def get_report_row(db: Session, report_id: int) -> Optional[Dict[str, Any]]:
    row = _report_query(db).filter(Report.id == report_id).first()
    return _report_row(row) if row else None


# =============================================================================
# COMMENTS
# =============================================================================

def _comment_query(db: Session):
    return (
        db.query(Comment, User.name.label("user_name"), User.role.label("user_role"))
        .join(User, Comment.user_id == User.id)
    )


def _comment_row(row) -> Dict[str, Any]:
    comment = row.Comment
    return {
        "id": comment.id,
        "report_id": comment.report_id,
        "user_id": comment.user_id,
        "user_name": row.user_name,
        "user_role": row.user_role,
        "content": comment.content,
        "created_at": _iso(comment.created_at),
    }


def list_comments(db: Session, report_id: int) -> List[Dict[str, Any]]:
    """Enriched comments of a report, oldest first"""
    rows = (
        _comment_query(db)
        .filter(Comment.report_id == report_id)
        .order_by(Comment.created_at.asc(), Comment.id.asc())
        .all()
    )
    return [_comment_row(row) for row in rows]


def get_comment_row(db: Session, comment_id: int) -> Optional[Dict[str, Any]]:
    row = _comment_query(db).filter(Comment.id == comment_id).first()
    return _comment_row(row) if row else None
