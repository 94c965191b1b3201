#!/usr/bin/env python3
"""
Lot Click Timing and Session Duration

- Lot clicks per day of week, Monday through Sunday
- Average session duration across the client's maps, as MM:SS

Example:
  python -m queries.engagement --client "Coastal Bend Lots" --start-date 2025-12-01
"""

from __future__ import annotations

from typing import List

from google.analytics.data_v1beta import BetaAnalyticsDataClient
from google.analytics.data_v1beta.types import Dimension, Metric, OrderBy, RunReportRequest

from queries.common import (
    base_parser,
    client_filter,
    create_client,
    date_ranges,
    dimension_value,
    lot_click_filter,
    metric_float,
    metric_int,
    property_name,
    save_csv,
)
from reporting.config import load_settings
from reporting.metrics import format_duration
from reporting.models import DayOfWeekClicks

QUERY_NAME = "Lot Click Timing"

# GA4 dayOfWeek: 0 = Sunday
DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def build_day_of_week_request(property_id: str, client_name: str, start_date: str, end_date: str) -> RunReportRequest:
    return RunReportRequest(
        property=property_name(property_id),
        date_ranges=date_ranges(start_date, end_date),
        dimensions=[Dimension(name="dayOfWeek")],
        metrics=[Metric(name="eventCount")],
        dimension_filter=lot_click_filter(client_name),
        order_bys=[OrderBy(dimension=OrderBy.DimensionOrderBy(dimension_name="dayOfWeek"), desc=False)],
    )


def _monday_first(item: DayOfWeekClicks) -> int:
    return 7 if item.day_index == 0 else item.day_index


def fetch_clicks_by_day_of_week(
    client: BetaAnalyticsDataClient,
    property_id: str,
    client_name: str,
    start_date: str,
    end_date: str,
) -> List[DayOfWeekClicks]:
    response = client.run_report(build_day_of_week_request(property_id, client_name, start_date, end_date))

    results: List[DayOfWeekClicks] = []
    for row in response.rows:
        day_index = int(dimension_value(row, 0) or 0)
        day = DAY_NAMES[day_index] if 0 <= day_index < len(DAY_NAMES) else "Unknown"
        results.append(DayOfWeekClicks(day=day, clicks=metric_int(row), day_index=day_index))

    results.sort(key=_monday_first)
    return results


def build_duration_request(property_id: str, client_name: str, start_date: str, end_date: str) -> RunReportRequest:
    return RunReportRequest(
        property=property_name(property_id),
        date_ranges=date_ranges(start_date, end_date),
        metrics=[Metric(name="averageSessionDuration")],
        dimension_filter=client_filter(client_name),
    )


def fetch_avg_session_duration(
    client: BetaAnalyticsDataClient,
    property_id: str,
    client_name: str,
    start_date: str,
    end_date: str,
) -> str:
    response = client.run_report(build_duration_request(property_id, client_name, start_date, end_date))
    seconds = metric_float(response.rows[0]) if response.rows else 0.0
    return format_duration(seconds)


def main():
    args = base_parser("Lot clicks by weekday and average session duration").parse_args()

    settings = load_settings()
    client = create_client(settings)
    days = fetch_clicks_by_day_of_week(client, settings.property_id, args.client, args.start_date, args.end_date)
    duration = fetch_avg_session_duration(client, settings.property_id, args.client, args.start_date, args.end_date)

    print(f"Query: {QUERY_NAME}")
    print(f"Date range: {args.start_date} -> {args.end_date}")
    print(f"Average session duration: {duration}")
    print("=" * 40)
    print(f"{'Day':<15} {'Lot Clicks':>15}")
    print("-" * 40)
    for day in days:
        print(f"{day.day:<15} {day.clicks:>15,}")

    if args.output_prefix and days:
        print(f"Saved CSV to {save_csv([d.to_dict() for d in days], args.output_prefix)}")


if __name__ == "__main__":
    main()
