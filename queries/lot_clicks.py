#!/usr/bin/env python3
"""
Lot Clicks by Community

Counts lot info-window opens (`maps-openInfoWin` events) per community.

Example:
  python -m queries.lot_clicks --client "Coastal Bend Lots" --start-date 28daysAgo
"""

from __future__ import annotations

from google.analytics.data_v1beta import BetaAnalyticsDataClient
from google.analytics.data_v1beta.types import Dimension, Metric, OrderBy, RunReportRequest

from queries.common import (
    COMMUNITY_DIMENSION,
    COMMUNITY_LIMIT,
    base_parser,
    create_client,
    date_ranges,
    dimension_value,
    lot_click_filter,
    metric_int,
    property_name,
    save_csv,
)
from reporting.config import load_settings
from reporting.metrics import is_reportable
from reporting.models import CommunityClicks, LotClicksResult

QUERY_NAME = "Lot Clicks by Community"


def build_request(property_id: str, client_name: str, start_date: str, end_date: str, limit: int = COMMUNITY_LIMIT) -> RunReportRequest:
    return RunReportRequest(
        property=property_name(property_id),
        date_ranges=date_ranges(start_date, end_date),
        dimensions=[Dimension(name=COMMUNITY_DIMENSION)],
        metrics=[Metric(name="eventCount")],
        dimension_filter=lot_click_filter(client_name),
        order_bys=[OrderBy(metric=OrderBy.MetricOrderBy(metric_name="eventCount"), desc=True)],
        limit=limit,
    )


def parse_response(response) -> LotClicksResult:
    by_community: list[CommunityClicks] = []
    for row in response.rows:
        community = dimension_value(row, 0)
        if is_reportable(community):
            by_community.append(CommunityClicks(community=community, lot_clicks=metric_int(row)))

    total = sum(item.lot_clicks for item in by_community)
    return LotClicksResult(total=total, by_community=by_community)


def fetch_lot_clicks(
    client: BetaAnalyticsDataClient,
    property_id: str,
    client_name: str,
    start_date: str,
    end_date: str,
    limit: int = COMMUNITY_LIMIT,
) -> LotClicksResult:
    request = build_request(property_id, client_name, start_date, end_date, limit)
    return parse_response(client.run_report(request))


def main():
    args = base_parser("Lot clicks per community from GA4").parse_args()

    settings = load_settings()
    client = create_client(settings)
    result = fetch_lot_clicks(client, settings.property_id, args.client, args.start_date, args.end_date)

    print(f"Query: {QUERY_NAME}")
    print(f"Date range: {args.start_date} -> {args.end_date}")
    print("=" * 60)
    print(f"{'Community':<40} {'Lot Clicks':>15}")
    print("-" * 60)

    if not result.by_community:
        print("No data returned.")
        return

    for item in result.by_community:
        print(f"{item.community[:40]:<40} {item.lot_clicks:>15,}")
    print("-" * 60)
    print(f"{'Total':<40} {result.total:>15,}")

    if args.output_prefix:
        records = [{"community": i.community, "lot_clicks": i.lot_clicks} for i in result.by_community]
        print(f"Saved CSV to {save_csv(records, args.output_prefix)}")


if __name__ == "__main__":
    main()
