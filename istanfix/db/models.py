"""
SQLAlchemy Models for Database
==============================

Schema for municipal issue reporting:
- Users (citizens and government staff)
- Reference data (categories, districts, neighborhoods)
- Reports and their comments

Referential rules live in the database, not in the ORM:
- users      -> reports.user_id          ON DELETE SET NULL
- users      -> comments.user_id         ON DELETE CASCADE
- categories -> reports.category_id      ON DELETE RESTRICT
- districts  -> reports.district_id      ON DELETE RESTRICT
- districts  -> neighborhoods            ON DELETE CASCADE
- neighborhoods -> reports.neighborhood_id ON DELETE SET NULL
- reports    -> comments.report_id       ON DELETE CASCADE

Supports both SQLite and PostgreSQL via SQLAlchemy.
"""

import enum
from datetime import datetime
from sqlalchemy import (
    Column, String, Text, Integer, Float, DateTime, ForeignKey,
    UniqueConstraint, Index, CheckConstraint, DDL, event
)
from sqlalchemy.orm import relationship, declarative_base

Base = declarative_base()


# =============================================================================
# ENUMS
# =============================================================================

class UserRole(str, enum.Enum):
    """Account roles"""
    USER = "user"
    GOVERNMENT = "government"


class ReportStatus(str, enum.Enum):
    """Report lifecycle status"""
    OPEN = "open"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"


def _check_in(column: str, enum_cls) -> str:
    values = ", ".join(f"'{member.value}'" for member in enum_cls)
    return f"{column} IN ({values})"


# =============================================================================
# USERS
# =============================================================================

class User(Base):
    """Registered account"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.USER.value)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint(_check_in("role", UserRole), name="ck_users_role"),
    )

    # Relationships
    reports = relationship("Report", back_populates="user", passive_deletes="all")
    comments = relationship("Comment", back_populates="user", cascade="all", passive_deletes=True)


# =============================================================================
# REFERENCE DATA
# =============================================================================

class Category(Base):
    """Issue category (roads, lighting, ...)"""
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)
    icon = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)

    reports = relationship("Report", back_populates="category", passive_deletes="all")


class District(Base):
    """Istanbul district (ilçe)"""
    __tablename__ = "districts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)
    area_code = Column(String(10), nullable=True)

    neighborhoods = relationship("Neighborhood", back_populates="district", cascade="all", passive_deletes=True)
    reports = relationship("Report", back_populates="district", passive_deletes="all")


class Neighborhood(Base):
    """Neighborhood (mahalle) within a district"""
    __tablename__ = "neighborhoods"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    district_id = Column(Integer, ForeignKey("districts.id", ondelete="CASCADE"), nullable=False)
    postal_code = Column(String(10), nullable=True)

    __table_args__ = (
        UniqueConstraint("name", "district_id", name="uq_neighborhood_name_district"),
        Index("ix_neighborhoods_district_id", "district_id"),
    )

    district = relationship("District", back_populates="neighborhoods")
    reports = relationship("Report", back_populates="neighborhood", passive_deletes="all")


# =============================================================================
# REPORTS
# =============================================================================

class Report(Base):
    """Citizen-submitted infrastructure issue"""
    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, autoincrement=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False)
    district_id = Column(Integer, ForeignKey("districts.id", ondelete="RESTRICT"), nullable=False)
    neighborhood_id = Column(Integer, ForeignKey("neighborhoods.id", ondelete="SET NULL"), nullable=True)

    address = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    image_path = Column(String(500), nullable=True)  # relative, e.g. "uploads/1700000000000-123456789.jpg"

    status = Column(String(20), nullable=False, default=ReportStatus.OPEN.value)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint(_check_in("status", ReportStatus), name="ck_reports_status"),
        CheckConstraint(
            "(latitude IS NULL AND longitude IS NULL) OR (latitude IS NOT NULL AND longitude IS NOT NULL)",
            name="ck_reports_coordinates_pair",
        ),
        Index("ix_reports_created_at", "created_at"),
        Index("ix_reports_category_id", "category_id"),
        Index("ix_reports_status", "status"),
    )

    # Relationships
    category = relationship("Category", back_populates="reports")
    district = relationship("District", back_populates="reports")
    neighborhood = relationship("Neighborhood", back_populates="reports")
    user = relationship("User", back_populates="reports")
    comments = relationship("Comment", back_populates="report", cascade="all", passive_deletes=True)


class Comment(Base):
    """Comment on a report (never edited)"""
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    report_id = Column(Integer, ForeignKey("reports.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("ix_comments_report_id", "report_id"),
    )

    report = relationship("Report", back_populates="comments")
    user = relationship("User", back_populates="comments")


# =============================================================================
# TRIGGERS
# =============================================================================
#
# updated_at is stamped by the database on any UPDATE that did not set it, so
# writes that bypass the ORM still refresh it. The stamp never precedes
# created_at. SQLite stores DateTime as "YYYY-MM-DD HH:MM:SS.ffffff", which the
# trigger reproduces so text comparison stays ordered.

_SQLITE_UPDATED_AT_TRIGGER = DDL(
    "CREATE TRIGGER IF NOT EXISTS trg_reports_updated_at "
    "AFTER UPDATE ON reports FOR EACH ROW "
    "WHEN NEW.updated_at IS OLD.updated_at "
    "BEGIN "
    "UPDATE reports SET updated_at = MAX(strftime('%%Y-%%m-%%d %%H:%%M:%%f', 'now') || '000', NEW.created_at) "
    "WHERE id = NEW.id; "
    "END"
)

_PG_UPDATED_AT_FUNCTION = DDL(
    "CREATE OR REPLACE FUNCTION reports_set_updated_at() RETURNS trigger AS $$ "
    "BEGIN "
    "IF NEW.updated_at IS NOT DISTINCT FROM OLD.updated_at THEN "
    "NEW.updated_at := GREATEST(timezone('utc', now()), NEW.created_at); "
    "END IF; "
    "RETURN NEW; "
    "END; "
    "$$ LANGUAGE plpgsql"
)

_PG_UPDATED_AT_TRIGGER = DDL(
    "CREATE TRIGGER trg_reports_updated_at BEFORE UPDATE ON reports "
    "FOR EACH ROW EXECUTE FUNCTION reports_set_updated_at()"
)

event.listen(Report.__table__, "after_create", _SQLITE_UPDATED_AT_TRIGGER.execute_if(dialect="sqlite"))
event.listen(Report.__table__, "after_create", _PG_UPDATED_AT_FUNCTION.execute_if(dialect="postgresql"))
event.listen(Report.__table__, "after_create", _PG_UPDATED_AT_TRIGGER.execute_if(dialect="postgresql"))
