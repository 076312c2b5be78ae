"""
Authentication Service API Package

This package contains the API layer for the authentication service, including
endpoints, request/response models, and API routing configuration.

Package Structure:
    - v1/: Version 1 API implementation
        - api.py: Router aggregation
        - endpoints/: API endpoint handlers
        - models/: Pydantic request/response models
    - dependencies.py: Service and repository providers

The API follows RESTful principles and uses FastAPI for automatic OpenAPI
documentation generation.
"""
