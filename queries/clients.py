#!/usr/bin/env python3
"""
Available Clients

Lists the client names that sent events in the last 90 days, most active first.

Example:
  python -m queries.clients
"""

from __future__ import annotations

import argparse
from typing import List

from google.analytics.data_v1beta import BetaAnalyticsDataClient
from google.analytics.data_v1beta.types import Dimension, Metric, OrderBy, RunReportRequest

from queries.common import CLIENT_DIMENSION, create_client, date_ranges, dimension_value, property_name
from reporting.config import load_settings
from reporting.metrics import is_reportable

QUERY_NAME = "Available Clients"
CLIENT_LIMIT = 100


def build_request(property_id: str, limit: int = CLIENT_LIMIT) -> RunReportRequest:
    return RunReportRequest(
        property=property_name(property_id),
        date_ranges=date_ranges("90daysAgo", "today"),
        dimensions=[Dimension(name=CLIENT_DIMENSION)],
        metrics=[Metric(name="eventCount")],
        order_bys=[OrderBy(metric=OrderBy.MetricOrderBy(metric_name="eventCount"), desc=True)],
        limit=limit,
    )


def fetch_available_clients(client: BetaAnalyticsDataClient, property_id: str, limit: int = CLIENT_LIMIT) -> List[str]:
    response = client.run_report(build_request(property_id, limit))
    clients: List[str] = []
    for row in response.rows:
        name = dimension_value(row, 0)
        if is_reportable(name):
            clients.append(name)
    return clients


def main():
    parser = argparse.ArgumentParser(description="List clients tracked in GA4")
    parser.add_argument("--limit", type=int, default=CLIENT_LIMIT, help="Maximum number of clients (default 100)")
    args = parser.parse_args()

    settings = load_settings()
    clients = fetch_available_clients(create_client(settings), settings.property_id, args.limit)

    print(f"Query: {QUERY_NAME}")
    if not clients:
        print("No data returned.")
        return
    for idx, name in enumerate(clients, start=1):
        print(f"{idx:<5} {name}")


if __name__ == "__main__":
    main()
