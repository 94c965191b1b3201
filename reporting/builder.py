"""
Market report builder.

Runs the GA4 queries for one client and date range concurrently, merges the
community-level results and derives the summary and insights.

Usage:
    from queries.common import create_client
    from reporting.builder import build_market_report

    report = build_market_report(create_client(settings), settings.property_id,
                                 "Coastal Bend Lots", "2025-12-21", "2026-01-17")
    payload = report.to_dict()
"""

from __future__ import annotations

import logging
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Dict, List

from queries.audience import fetch_breakdown, fetch_traffic_sources
from queries.engagement import fetch_avg_session_duration, fetch_clicks_by_day_of_week
from queries.lot_clicks import fetch_lot_clicks
from queries.map_loads import fetch_map_loads
from queries.top_lots import fetch_top_lots
from queries.views_over_time import fetch_views_over_time
from reporting.metrics import click_through_rate, format_long_date, slugify
from reporting.models import (
    CommunityPerformance,
    Insight,
    InsightType,
    LotClicksResult,
    MapLoadsResult,
    MarketReport,
    Summary,
    TopLot,
)

logger = logging.getLogger(__name__)

REPORT_TOP_LOTS = 25
LOW_CTR_THRESHOLD = 50
MIN_LOADS_FOR_OPPORTUNITY = 20


class ReportError(Exception):
    """A query or parsing step failed; the report was not built."""


def run_concurrently(tasks: Dict[str, Callable[[], Any]], max_workers: int | None = None) -> Dict[str, Any]:
    """
    Run independent callables in a thread pool and return their results by name.

    The first failure wins: it is re-raised at once, tasks that have not
    started are cancelled and tasks already running are not waited for.
    """
    pool = ThreadPoolExecutor(max_workers=max_workers or max(1, len(tasks)))
    try:
        futures: Dict[Future, str] = {pool.submit(task): name for name, task in tasks.items()}
        done, _ = wait(futures, return_when=FIRST_EXCEPTION)

        for future in done:
            error = future.exception()
            if error is not None:
                logger.debug("Query '%s' failed: %s", futures[future], error)
                raise error

        return {futures[future]: future.result() for future in done}
    finally:
        pool.shutdown(wait=False, cancel_futures=True)


def merge_community_performance(map_loads: MapLoadsResult, lot_clicks: LotClicksResult) -> List[CommunityPerformance]:
    """
    Join map loads and lot clicks by community name.

    Only communities with tracked map loads are reported; clicks for any
    other community are ignored. When a community has several map-load rows
    (one per url path), the last row replaces the earlier ones. The result
    is sorted by map loads, descending, with ties kept in map-load order.
    """
    by_name: Dict[str, CommunityPerformance] = {}
    for item in map_loads.by_community:
        by_name[item.community] = CommunityPerformance(name=item.community, path=item.path, map_loads=item.map_loads)

    for item in lot_clicks.by_community:
        performance = by_name.get(item.community)
        if performance is None:
            logger.debug("Dropping %s lot clicks for '%s': no map loads tracked", item.lot_clicks, item.community)
            continue
        performance.lot_clicks += item.lot_clicks

    for performance in by_name.values():
        performance.ctr = click_through_rate(performance.lot_clicks, performance.map_loads)

    return sorted(by_name.values(), key=lambda p: p.map_loads, reverse=True)


def generate_insights(community_performance: List[CommunityPerformance], top_lots: List[TopLot]) -> List[Insight]:
    insights: List[Insight] = []

    if community_performance:
        top = community_performance[0]
        insights.append(
            Insight(
                type=InsightType.TRENDING,
                title=f"{top.name} leads engagement",
                description=(
                    f"With {top.map_loads:,} map loads and {top.lot_clicks:,} lot clicks, "
                    f"{top.name} is your most active community."
                ),
            )
        )

    if top_lots:
        hot = top_lots[0]
        lot_name = hot.lot.split(",")[0]
        insights.append(
            Insight(
                type=InsightType.HOT,
                title=f"{lot_name} is generating strong interest",
                description=(
                    f"This lot in {hot.community} received {hot.clicks:,} clicks "
                    f"({hot.share}% of total), indicating high buyer demand."
                ),
            )
        )

    candidates = [
        c for c in community_performance if c.ctr < LOW_CTR_THRESHOLD and c.map_loads > MIN_LOADS_FOR_OPPORTUNITY
    ]
    if candidates:
        opp = candidates[0]
        insights.append(
            Insight(
                type=InsightType.OPPORTUNITY,
                title=f"{opp.name} has conversion potential",
                description=(
                    f"High traffic ({opp.map_loads:,} loads) but {opp.ctr:.1f}% CTR. "
                    "Review lot availability and pricing."
                ),
            )
        )

    return insights


def build_market_report(client, property_id: str, client_name: str, start_date: str, end_date: str) -> MarketReport:
    """
    Build the full report for `client_name` between two inclusive `YYYY-MM-DD` dates.

    Raises:
        ReportError: If any query fails or returns data that cannot be parsed.
    """
    args = (client, property_id, client_name, start_date, end_date)
    tasks: Dict[str, Callable[[], Any]] = {
        "map_loads": lambda: fetch_map_loads(*args),
        "lot_clicks": lambda: fetch_lot_clicks(*args),
        "top_lots": lambda: fetch_top_lots(*args, limit=REPORT_TOP_LOTS),
        "views_over_time": lambda: fetch_views_over_time(*args),
        "clicks_by_day_of_week": lambda: fetch_clicks_by_day_of_week(*args),
        "device_breakdown": lambda: fetch_breakdown(*args, dimension="deviceCategory"),
        "country_breakdown": lambda: fetch_breakdown(*args, dimension="country"),
        "browser_breakdown": lambda: fetch_breakdown(*args, dimension="browser"),
        "os_breakdown": lambda: fetch_breakdown(*args, dimension="operatingSystem"),
        "traffic_sources": lambda: fetch_traffic_sources(*args),
        "avg_time_on_map": lambda: fetch_avg_session_duration(*args),
    }

    try:
        data = run_concurrently(tasks)
        date_range = {
            "start": format_long_date(start_date),
            "end": format_long_date(end_date),
            "label": f"{start_date} to {end_date}",
        }
    except Exception as exc:
        raise ReportError(str(exc)) from exc

    map_loads: MapLoadsResult = data["map_loads"]
    lot_clicks: LotClicksResult = data["lot_clicks"]
    community_performance = merge_community_performance(map_loads, lot_clicks)

    summary = Summary(
        total_map_loads=map_loads.total,
        total_lot_clicks=lot_clicks.total,
        click_through_rate=click_through_rate(lot_clicks.total, map_loads.total),
        top_community=community_performance[0].name if community_performance else "N/A",
        avg_time_on_map=data["avg_time_on_map"],
    )

    return MarketReport(
        organization={"name": client_name, "clientId": slugify(client_name)},
        date_range=date_range,
        summary=summary,
        community_performance=community_performance,
        top_lots=data["top_lots"],
        views_over_time=data["views_over_time"],
        insights=generate_insights(community_performance, data["top_lots"]),
        clicks_by_day_of_week=data["clicks_by_day_of_week"],
        device_breakdown=data["device_breakdown"],
        country_breakdown=data["country_breakdown"],
        browser_breakdown=data["browser_breakdown"],
        os_breakdown=data["os_breakdown"],
        traffic_sources=data["traffic_sources"],
    )
