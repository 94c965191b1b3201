#!/usr/bin/env python3
"""
Map Loads by Community

Counts page views of each community's interactive lot map for one client.

Example:
  python -m queries.map_loads --client "Coastal Bend Lots" \
      --start-date 2025-12-21 --end-date 2026-01-17
"""

from __future__ import annotations

from google.analytics.data_v1beta import BetaAnalyticsDataClient
from google.analytics.data_v1beta.types import Dimension, Metric, OrderBy, RunReportRequest

from queries.common import (
    COMMUNITY_DIMENSION,
    COMMUNITY_LIMIT,
    URL_PATH_DIMENSION,
    base_parser,
    client_filter,
    create_client,
    date_ranges,
    dimension_value,
    metric_int,
    property_name,
    save_csv,
)
from reporting.config import load_settings
from reporting.metrics import is_reportable
from reporting.models import CommunityLoads, MapLoadsResult

QUERY_NAME = "Map Loads by Community"


def build_request(property_id: str, client_name: str, start_date: str, end_date: str, limit: int = COMMUNITY_LIMIT) -> RunReportRequest:
    return RunReportRequest(
        property=property_name(property_id),
        date_ranges=date_ranges(start_date, end_date),
        dimensions=[Dimension(name=COMMUNITY_DIMENSION), Dimension(name=URL_PATH_DIMENSION)],
        metrics=[Metric(name="screenPageViews")],
        dimension_filter=client_filter(client_name),
        order_bys=[OrderBy(metric=OrderBy.MetricOrderBy(metric_name="screenPageViews"), desc=True)],
        limit=limit,
    )


def parse_response(response) -> MapLoadsResult:
    by_community: list[CommunityLoads] = []
    for row in response.rows:
        community = dimension_value(row, 0)
        if not is_reportable(community):
            continue
        by_community.append(CommunityLoads(community=community, path=dimension_value(row, 1), map_loads=metric_int(row)))

    total = 0
    for item in by_community:
        total += item.map_loads
    return MapLoadsResult(total=total, by_community=by_community)


def fetch_map_loads(
    client: BetaAnalyticsDataClient,
    property_id: str,
    client_name: str,
    start_date: str,
    end_date: str,
    limit: int = COMMUNITY_LIMIT,
) -> MapLoadsResult:
    request = build_request(property_id, client_name, start_date, end_date, limit)
    return parse_response(client.run_report(request))


def main():
    parser = base_parser("Map loads per community from GA4")
    args = parser.parse_args()

    settings = load_settings()
    client = create_client(settings)
    result = fetch_map_loads(client, settings.property_id, args.client, args.start_date, args.end_date)

    print(f"Query: {QUERY_NAME}")
    print(f"Date range: {args.start_date} -> {args.end_date}")
    print("=" * 90)
    print(f"{'Community':<35} {'Path':<40} {'Map Loads':>12}")
    print("-" * 90)

    if not result.by_community:
        print("No data returned.")
        return

    for item in result.by_community:
        print(f"{item.community[:35]:<35} {item.path[:40]:<40} {item.map_loads:>12,}")
    print("-" * 90)
    print(f"{'Total':<76} {result.total:>12,}")

    if args.output_prefix:
        records = [{"community": i.community, "path": i.path, "map_loads": i.map_loads} for i in result.by_community]
        print(f"Saved CSV to {save_csv(records, args.output_prefix)}")


if __name__ == "__main__":
    main()
