#!/usr/bin/env python3
"""
Map Views Over Time

Daily map views per community, reshaped into one record per date label
("Jan 17") with a running total and a count per community series key.

Example:
  python -m queries.views_over_time --client "Coastal Bend Lots" \
      --start-date 2025-12-21 --end-date 2026-01-17 --output-prefix views
"""

from __future__ import annotations

from typing import Dict, Iterable, List

import pandas as pd
from google.analytics.data_v1beta import BetaAnalyticsDataClient
from google.analytics.data_v1beta.types import Dimension, Metric, OrderBy, RunReportRequest

from queries.common import (
    COMMUNITY_DIMENSION,
    TIME_SERIES_LIMIT,
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
from reporting.metrics import NOT_SET, PLACEHOLDER, format_date_label, series_key
from reporting.models import ViewOverTime

QUERY_NAME = "Map Views Over Time"


def build_request(property_id: str, client_name: str, start_date: str, end_date: str, limit: int = TIME_SERIES_LIMIT) -> RunReportRequest:
    return RunReportRequest(
        property=property_name(property_id),
        date_ranges=date_ranges(start_date, end_date),
        dimensions=[Dimension(name="date"), Dimension(name=COMMUNITY_DIMENSION)],
        metrics=[Metric(name="screenPageViews")],
        dimension_filter=client_filter(client_name),
        order_bys=[OrderBy(dimension=OrderBy.DimensionOrderBy(dimension_name="date"), desc=False)],
        limit=limit,
    )


def reshape(rows: Iterable[tuple[str, str, int]]) -> List[ViewOverTime]:
    """
    Fold `(YYYYMMDD, community, views)` rows into per-date records.

    Records keep the order in which dates first appear; rows for the same
    date and community are summed.
    """
    by_date: Dict[str, ViewOverTime] = {}
    for raw_date, community, views in rows:
        if community in (NOT_SET, PLACEHOLDER):
            continue
        label = format_date_label(raw_date)
        point = by_date.get(label)
        if point is None:
            point = by_date[label] = ViewOverTime(date=label)
        point.add(series_key(community), views)
    return list(by_date.values())


def parse_response(response) -> List[ViewOverTime]:
    return reshape((dimension_value(row, 0), dimension_value(row, 1), metric_int(row)) for row in response.rows)


def fetch_views_over_time(
    client: BetaAnalyticsDataClient,
    property_id: str,
    client_name: str,
    start_date: str,
    end_date: str,
    limit: int = TIME_SERIES_LIMIT,
) -> List[ViewOverTime]:
    request = build_request(property_id, client_name, start_date, end_date, limit)
    return parse_response(client.run_report(request))


def to_frame(points: List[ViewOverTime]) -> pd.DataFrame:
    """One row per date, one column per community series key, plus the total."""
    records = [{"date": p.date, **p.communities, "total": p.total} for p in points]
    return pd.DataFrame(records).fillna(0)


def main():
    args = base_parser("Daily map views per community from GA4").parse_args()

    settings = load_settings()
    client = create_client(settings)
    points = fetch_views_over_time(client, settings.property_id, args.client, args.start_date, args.end_date)

    print(f"Query: {QUERY_NAME}")
    print(f"Date range: {args.start_date} -> {args.end_date}")

    if not points:
        print("No data returned.")
        return

    df = to_frame(points)
    print(df.to_string(index=False))

    if args.output_prefix:
        print(f"Saved CSV to {save_csv(df.to_dict('records'), args.output_prefix)}")


if __name__ == "__main__":
    main()
