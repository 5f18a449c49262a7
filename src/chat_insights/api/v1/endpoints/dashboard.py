# src/chat_insights/api/v1/endpoints/dashboard.py
"""Dashboard analytics endpoints for the Chat Insights API."""

from __future__ import annotations

from fastapi import APIRouter, Query

from chat_insights.schemas.dashboard import (
    DailyVolumeOut,
    DashboardOut,
    DashboardStatsOut,
    HourlyVolumeOut,
    PrefixCountOut,
    to_dashboard_out,
)
from chat_insights.services.aggregation import DEFAULT_PERIOD, Period
from chat_insights.services.analytics import DASHBOARD_SUBJECT

from ..dependencies import AnalyticsDep, SubjectDep

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

PeriodQuery = Query(DEFAULT_PERIOD, description="Trailing period: 7d or 30d")


@router.get("/", response_model=DashboardOut)
async def get_dashboard(
    analytics: AnalyticsDep,
    subject: SubjectDep,
    period: Period = PeriodQuery,
) -> DashboardOut:
    """Return stats, recent conversations and every series for the period."""
    summary = analytics.dashboard(period, subject=subject or DASHBOARD_SUBJECT)
    return to_dashboard_out(summary)


@router.get("/stats", response_model=DashboardStatsOut)
async def get_dashboard_stats(
    analytics: AnalyticsDep,
    subject: SubjectDep,
    period: Period = PeriodQuery,
) -> DashboardStatsOut:
    """Return row count, distinct sessions and the latest message time."""
    stats = analytics.dashboard_stats(period, subject=subject or DASHBOARD_SUBJECT)
    return DashboardStatsOut.model_validate(stats)


@router.get("/volume/daily", response_model=list[DailyVolumeOut])
async def get_daily_volume(
    analytics: AnalyticsDep,
    subject: SubjectDep,
    period: Period = PeriodQuery,
) -> list[DailyVolumeOut]:
    """Return one zero-filled point per civil date in the period."""
    points = analytics.daily_volume(period, subject=subject or DASHBOARD_SUBJECT)
    return [DailyVolumeOut.model_validate(point) for point in points]


@router.get("/volume/hourly", response_model=list[HourlyVolumeOut])
async def get_hourly_volume(
    analytics: AnalyticsDep,
    subject: SubjectDep,
    period: Period = PeriodQuery,
) -> list[HourlyVolumeOut]:
    """Return 24 zero-filled points by civil hour."""
    points = analytics.hourly_volume(period, subject=subject or DASHBOARD_SUBJECT)
    return [HourlyVolumeOut.model_validate(point) for point in points]


@router.get("/prefixes", response_model=list[PrefixCountOut])
async def get_prefix_distribution(
    analytics: AnalyticsDep,
    subject: SubjectDep,
    period: Period = PeriodQuery,
) -> list[PrefixCountOut]:
    """Return distinct clients per area code, largest first."""
    points = analytics.prefix_distribution(period, subject=subject or DASHBOARD_SUBJECT)
    return [PrefixCountOut.model_validate(point) for point in points]
