"""
Database Package - SQLAlchemy
=============================

Relational schema and storage client for Istanfix.
"""

from .models import (
    Base,
    User, Category, District, Neighborhood, Report, Comment,
    UserRole, ReportStatus,
)
from .session import Database

__all__ = [
    # Base
    "Base",
    # Accounts
    "User",
    # Reference data
    "Category", "District", "Neighborhood",
    # Reports
    "Report", "Comment",
    # Enums
    "UserRole", "ReportStatus",
    # Session
    "Database",
]
