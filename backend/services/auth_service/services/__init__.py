"""
Authentication Service Business Logic Package

This package contains the core business logic for the authentication service:
registration, credential checks, token issuing and refresh, and linked-account
management.

Modules:
    - auth_service.py: AuthenticationService

The service layer depends on a repository object rather than on the database
directly, so tests can exercise it against an in-memory store.
"""
