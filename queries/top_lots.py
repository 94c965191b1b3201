#!/usr/bin/env python3
"""
Top Lots by Clicks

Ranks individual lots by how often their info window was opened, with each
lot's share of the clicks returned. Lot labels look like
"Lot 12, Block 5, Gemini"; the last comma-separated segment names the
community.

Example:
  python -m queries.top_lots --client "Coastal Bend Lots" --limit 25 \
      --communities "Gemini,Kings Landing"
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from google.analytics.data_v1beta import BetaAnalyticsDataClient
from google.analytics.data_v1beta.types import Dimension, Metric, OrderBy, RunReportRequest

from queries.common import (
    LOT_DIMENSION,
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
from reporting.metrics import is_reportable, percentage_share
from reporting.models import TopLot

QUERY_NAME = "Top Lots by Clicks"
DEFAULT_LIMIT = 25
UNKNOWN_COMMUNITY = "Unknown"


def community_from_lot(lot: str) -> str:
    community = lot.split(",")[-1].strip()
    return community or UNKNOWN_COMMUNITY


def build_request(
    property_id: str,
    client_name: str,
    start_date: str,
    end_date: str,
    limit: int = DEFAULT_LIMIT,
    communities: Optional[Iterable[str]] = None,
) -> RunReportRequest:
    return RunReportRequest(
        property=property_name(property_id),
        date_ranges=date_ranges(start_date, end_date),
        dimensions=[Dimension(name=LOT_DIMENSION)],
        metrics=[Metric(name="eventCount")],
        dimension_filter=lot_click_filter(client_name, communities),
        order_bys=[OrderBy(metric=OrderBy.MetricOrderBy(metric_name="eventCount"), desc=True)],
        limit=limit,
    )


def rank_lots(rows: Iterable[tuple[str, int]]) -> List[TopLot]:
    """
    Rank `(lot, clicks)` pairs that arrive already sorted by clicks.

    Placeholder lots are dropped before the total is taken, so shares are
    relative to the lots that are actually listed.
    """
    kept = [(lot, clicks) for lot, clicks in rows if is_reportable(lot)]
    total = sum(clicks for _, clicks in kept)

    return [
        TopLot(
            rank=rank,
            lot=lot,
            community=community_from_lot(lot),
            clicks=clicks,
            share=percentage_share(clicks, total),
        )
        for rank, (lot, clicks) in enumerate(kept, start=1)
    ]


def parse_response(response) -> List[TopLot]:
    return rank_lots((dimension_value(row, 0), metric_int(row)) for row in response.rows)


def fetch_top_lots(
    client: BetaAnalyticsDataClient,
    property_id: str,
    client_name: str,
    start_date: str,
    end_date: str,
    limit: int = DEFAULT_LIMIT,
    communities: Optional[Iterable[str]] = None,
) -> List[TopLot]:
    request = build_request(property_id, client_name, start_date, end_date, limit, communities)
    return parse_response(client.run_report(request))


def main():
    parser = base_parser("List the most clicked lots from GA4")
    parser.add_argument("--limit", type=int, default=DEFAULT_LIMIT, help="Number of lots to return (default 25)")
    parser.add_argument("--communities", help="Comma-separated community names to restrict to")
    args = parser.parse_args()

    communities = [c.strip() for c in args.communities.split(",")] if args.communities else None

    settings = load_settings()
    client = create_client(settings)
    lots = fetch_top_lots(client, settings.property_id, args.client, args.start_date, args.end_date, args.limit, communities)

    print(f"Query: {QUERY_NAME}")
    print(f"Date range: {args.start_date} -> {args.end_date}")
    print("=" * 100)
    print(f"{'Rank':<5} {'Lot':<45} {'Community':<25} {'Clicks':>10} {'Share':>10}")
    print("-" * 100)

    if not lots:
        print("No data returned.")
        return

    for lot in lots:
        print(f"{lot.rank:<5} {lot.lot[:45]:<45} {lot.community[:25]:<25} {lot.clicks:>10,} {lot.share:>9.2f}%")

    if args.output_prefix:
        print(f"Saved CSV to {save_csv([lot.to_dict() for lot in lots], args.output_prefix)}")


if __name__ == "__main__":
    main()
