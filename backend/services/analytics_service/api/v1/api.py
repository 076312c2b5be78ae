"""
API Router Aggregation for Analytics Service v1

The v1 API provides the following endpoint groups:
    - Campaigns: lifecycle of the caller's promotion campaigns
    - Summary: per-day performance across Meta and Spotify

Every endpoint counts against the caller's hourly subscription quota.
"""

from fastapi import APIRouter, Depends

from services.analytics_service.api.dependencies import rate_limiter
from services.analytics_service.api.v1.endpoints import campaigns, summary

api_router = APIRouter(dependencies=[Depends(rate_limiter)])

api_router.include_router(campaigns.router, tags=["campaigns"])
api_router.include_router(summary.router, tags=["summary"])
