"""
Sponsors Portal Core Library.

Database management, models, repositories, GitHub API access, domain events,
services and logging shared by the web app and the Celery workers.

Usage:
    # Database
    from core.db import db, get_db
    from core.models import User, Sponsor
    from core.repositories import UserRepository, SponsorRepository

    # Config
    from core.config import get_settings, Settings

    # Logging
    from core.logging import get_logger, configure_logging
"""

__version__ = "1.0.0"

# Lazy imports to avoid circular dependencies
# Users should import directly from submodules:
#   from core.db import db
#   from core.config import get_settings
#   from core.logging import get_logger
