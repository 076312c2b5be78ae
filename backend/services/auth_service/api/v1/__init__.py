"""
Authentication Service API v1 Package

Version 1 provides:
    - Registration and login with email and password
    - Access token refresh
    - Session management (logout)
    - Profile lookup
    - Linked Meta / Spotify account listing and disconnection

All endpoints are prefixed with /api/v1 and follow consistent error handling
and response patterns.
"""
