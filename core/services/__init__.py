"""
Core services.

Services hold the business operations; routers and workers call them with
a session and an event bus.
"""

from core.services.sponsor_service import SyncResult, is_github_sponsor, synchronize_sponsor_status

__all__ = [
    "SyncResult",
    "is_github_sponsor",
    "synchronize_sponsor_status",
]
