"""
Authentication Service API v1 Endpoints Package

Endpoints:
    - auth.py: Register, login, refresh, logout, profile
    - integrations.py: Linked platform accounts
"""
