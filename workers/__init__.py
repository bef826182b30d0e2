"""
Celery Background Workers.

Provides the sponsorship synchronization jobs.

Usage:
    celery -A workers worker -Q sponsors,default --loglevel=info
    celery -A workers beat --loglevel=info
"""

from workers.celery_app import celery_app

__all__ = ["celery_app"]
