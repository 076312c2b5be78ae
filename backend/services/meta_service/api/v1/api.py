"""
API Router Aggregation for the Meta Ads Service v1

Attributes:
    api_router (APIRouter): Router with every v1 endpoint; each request is
        checked against the caller's subscription quota.
"""

from fastapi import APIRouter, Depends

from services.meta_service.api.dependencies import rate_limiter
from services.meta_service.api.v1.endpoints import metrics

api_router = APIRouter(dependencies=[Depends(rate_limiter)])

api_router.include_router(metrics.router, tags=["meta-metrics"])
