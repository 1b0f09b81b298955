"""
Istanfix - Municipal Issue Reporting Service
============================================

A small REST service for reporting city infrastructure problems in Istanbul:
1. Citizens sign up and submit reports (category, district, neighborhood, photo)
2. Government users triage report status
3. Everyone can comment on reports
"""

__version__ = "1.0.0"
