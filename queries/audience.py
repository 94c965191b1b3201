#!/usr/bin/env python3
"""
Audience Breakdowns

Active users split by device category, country, browser or operating system,
and sessions split by traffic source / medium. Percentages are relative to
the rows returned.

Example:
  python -m queries.audience --client "Coastal Bend Lots" --dimension country
"""

from __future__ import annotations

from typing import Dict, List

from google.analytics.data_v1beta import BetaAnalyticsDataClient
from google.analytics.data_v1beta.types import Dimension, Metric, OrderBy, RunReportRequest

from queries.common import (
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
from reporting.metrics import NOT_SET, percentage_of
from reporting.models import BreakdownItem, TrafficSource

QUERY_NAME = "Audience Breakdown"

# dimension -> row limit (None: everything GA4 returns)
BREAKDOWN_LIMITS: Dict[str, int | None] = {
    "deviceCategory": None,
    "country": 10,
    "browser": 6,
    "operatingSystem": 6,
}
TRAFFIC_SOURCE_LIMIT = 10


def build_breakdown_request(property_id: str, client_name: str, start_date: str, end_date: str, dimension: str) -> RunReportRequest:
    if dimension not in BREAKDOWN_LIMITS:
        raise ValueError(f"Unsupported breakdown dimension '{dimension}'.")

    request = RunReportRequest(
        property=property_name(property_id),
        date_ranges=date_ranges(start_date, end_date),
        dimensions=[Dimension(name=dimension)],
        metrics=[Metric(name="activeUsers")],
        dimension_filter=client_filter(client_name),
        order_bys=[OrderBy(metric=OrderBy.MetricOrderBy(metric_name="activeUsers"), desc=True)],
    )
    limit = BREAKDOWN_LIMITS[dimension]
    if limit:
        request.limit = limit
    return request


def fetch_breakdown(
    client: BetaAnalyticsDataClient,
    property_id: str,
    client_name: str,
    start_date: str,
    end_date: str,
    dimension: str,
) -> List[BreakdownItem]:
    response = client.run_report(build_breakdown_request(property_id, client_name, start_date, end_date, dimension))

    raw: List[tuple[str, int]] = []
    for row in response.rows:
        label = dimension_value(row, 0) or "Unknown"
        if dimension == "deviceCategory":
            label = label[:1].upper() + label[1:]
        raw.append((label, metric_int(row)))

    total_users = sum(users for _, users in raw)
    return [BreakdownItem(label=label, users=users, percentage=percentage_of(users, total_users)) for label, users in raw]


def build_traffic_request(property_id: str, client_name: str, start_date: str, end_date: str) -> RunReportRequest:
    return RunReportRequest(
        property=property_name(property_id),
        date_ranges=date_ranges(start_date, end_date),
        dimensions=[Dimension(name="sessionSource"), Dimension(name="sessionMedium")],
        metrics=[Metric(name="sessions")],
        dimension_filter=client_filter(client_name),
        order_bys=[OrderBy(metric=OrderBy.MetricOrderBy(metric_name="sessions"), desc=True)],
        limit=TRAFFIC_SOURCE_LIMIT,
    )


def fetch_traffic_sources(
    client: BetaAnalyticsDataClient,
    property_id: str,
    client_name: str,
    start_date: str,
    end_date: str,
) -> List[TrafficSource]:
    response = client.run_report(build_traffic_request(property_id, client_name, start_date, end_date))

    raw = [
        (dimension_value(row, 0) or NOT_SET, dimension_value(row, 1) or NOT_SET, metric_int(row))
        for row in response.rows
    ]
    total_sessions = sum(sessions for _, _, sessions in raw)
    return [
        TrafficSource(source=source, medium=medium, sessions=sessions, percentage=percentage_of(sessions, total_sessions))
        for source, medium, sessions in raw
    ]


def main():
    parser = base_parser("Audience breakdowns from GA4")
    parser.add_argument(
        "--dimension",
        choices=sorted(BREAKDOWN_LIMITS) + ["traffic"],
        default="deviceCategory",
        help="Breakdown to show; 'traffic' lists session sources",
    )
    args = parser.parse_args()

    settings = load_settings()
    client = create_client(settings)

    print(f"Query: {QUERY_NAME} ({args.dimension})")
    print(f"Date range: {args.start_date} -> {args.end_date}")
    print("=" * 70)

    if args.dimension == "traffic":
        sources = fetch_traffic_sources(client, settings.property_id, args.client, args.start_date, args.end_date)
        records = [s.to_dict() for s in sources]
        for s in sources:
            print(f"{s.source[:25]:<25} {s.medium[:15]:<15} {s.sessions:>12,} {s.percentage:>8.1f}%")
    else:
        items = fetch_breakdown(client, settings.property_id, args.client, args.start_date, args.end_date, args.dimension)
        records = [i.to_dict() for i in items]
        for i in items:
            print(f"{i.label[:40]:<40} {i.users:>12,} {i.percentage:>8.1f}%")

    if not records:
        print("No data returned.")
        return

    if args.output_prefix:
        print(f"Saved CSV to {save_csv(records, args.output_prefix)}")


if __name__ == "__main__":
    main()
