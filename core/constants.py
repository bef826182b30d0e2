"""
Application constants for the Sponsors Portal.
"""

# =============================================================================
# GitHub endpoints
# =============================================================================

GITHUB_API_BASE = "https://api.github.com"
GITHUB_GRAPHQL_ENDPOINT = "https://api.github.com/graphql"
GITHUB_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
GITHUB_ACCESS_TOKEN_URL = "https://github.com/login/oauth/access_token"

USER_AGENT = "SponsorsPortal/1.0"

# =============================================================================
# Session keys
# =============================================================================

SESSION_OAUTH_STATE = "oauth_state"
SESSION_INTENDED_URL = "url.intended"

# =============================================================================
# Auth cookie
# =============================================================================

ACCESS_TOKEN_COOKIE = "access_token"

# =============================================================================
# Routes
# =============================================================================

AUTH_PREFIX = "/auth"
LOGIN_PATH = f"{AUTH_PREFIX}/github"
CALLBACK_PATH = f"{LOGIN_PATH}/callback"
