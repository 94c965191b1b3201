from conftest import FakeGA4Client

from queries.audience import fetch_breakdown, fetch_traffic_sources
from queries.clients import fetch_available_clients
from queries.common import LOT_CLICK_CATEGORY
from queries.engagement import fetch_avg_session_duration, fetch_clicks_by_day_of_week
from queries.lot_clicks import fetch_lot_clicks
from queries.map_loads import fetch_map_loads
from queries.top_lots import community_from_lot, fetch_top_lots, rank_lots
from queries.views_over_time import fetch_views_over_time, reshape, to_frame

ARGS = ("123456789", "Coastal Bend Lots", "2025-12-21", "2026-01-17")


def test_map_loads_drops_unset_and_placeholder_communities(report_responses):
    client = FakeGA4Client(report_responses)
    result = fetch_map_loads(client, *ARGS)

    assert [c.community for c in result.by_community] == ["Gemini", "Kings Landing", "Royal Oak"]
    assert result.total == 279 + 178 + 34
    assert result.by_community[0].path == "/maps/gemini"


def test_map_loads_request_filters_on_client(report_responses):
    client = FakeGA4Client(report_responses)
    fetch_map_loads(client, *ARGS)

    request = client.requests[0]
    assert request.property == "properties/123456789"
    assert request.date_ranges[0].start_date == "2025-12-21"
    assert request.date_ranges[0].end_date == "2026-01-17"
    assert request.dimension_filter.filter.field_name == "customEvent:c_client"
    assert request.dimension_filter.filter.string_filter.value == "Coastal Bend Lots"
    assert request.limit == 100


def test_lot_clicks_restricts_to_info_window_events(report_responses):
    client = FakeGA4Client(report_responses)
    result = fetch_lot_clicks(client, *ARGS)

    assert result.total == 667 + 20 + 40
    assert "-" not in [c.community for c in result.by_community]
    expressions = client.requests[0].dimension_filter.and_group.expressions
    values = {e.filter.field_name: e.filter.string_filter.value for e in expressions}
    assert values == {"customEvent:c_client": "Coastal Bend Lots", "customEvent:c_category": LOT_CLICK_CATEGORY}


def test_rank_lots_example():
    lots = rank_lots([("Lot 1, Block 2, L1", 30), ("Lot 2, Block 2, L2", 10)])

    assert [(lot.rank, lot.clicks, lot.share) for lot in lots] == [(1, 30, 75.0), (2, 10, 25.0)]
    assert [lot.community for lot in lots] == ["L1", "L2"]


def test_rank_lots_excludes_placeholders_before_totalling():
    lots = rank_lots([("(not set)", 50), ("Lot 1, Gemini", 3), ("-", 10), ("", 4), ("Lot 2, Gemini", 1)])

    assert [lot.lot for lot in lots] == ["Lot 1, Gemini", "Lot 2, Gemini"]
    assert [lot.rank for lot in lots] == [1, 2]
    assert [lot.share for lot in lots] == [75.0, 25.0]


def test_rank_lots_zero_clicks_have_zero_share():
    lots = rank_lots([("Lot 1, Gemini", 0), ("Lot 2, Gemini", 0)])
    assert [lot.share for lot in lots] == [0, 0]


def test_community_from_lot():
    assert community_from_lot("Lot 12, Block 5, Gemini") == "Gemini"
    assert community_from_lot("Lot 12, ") == "Unknown"


def test_top_lots_with_community_filter():
    client = FakeGA4Client({("customEvent:c_lot",): [(("Lot 1, Gemini",), (8,))]})
    lots = fetch_top_lots(client, *ARGS, limit=50, communities=["Gemini", "Kings Landing"])

    assert len(lots) == 1
    request = client.requests[0]
    assert request.limit == 50
    in_list = request.dimension_filter.and_group.expressions[2].filter
    assert in_list.field_name == "customEvent:c_community"
    assert list(in_list.in_list_filter.values) == ["Gemini", "Kings Landing"]


def test_reshape_sums_rows_per_date_and_community():
    points = reshape(
        [
            ("20260116", "Gemini", 19),
            ("20260116", "Kings Landing", 12),
            ("20260117", "Gemini", 26),
            ("20260117", "Gemini", 4),
            ("20260117", "", 3),
            ("20260117", "(not set)", 99),
        ]
    )

    assert [p.date for p in points] == ["Jan 16", "Jan 17"]
    assert points[0].communities == {"gemini": 19, "kingsLanding": 12}
    assert points[0].total == 31
    assert points[1].communities == {"gemini": 30, "other": 3}
    assert points[1].total == 33


def test_reshape_keeps_first_seen_date_order():
    points = reshape([("20260117", "Gemini", 1), ("20260101", "Gemini", 1), ("20260117", "Gemini", 1)])
    assert [p.date for p in points] == ["Jan 17", "Jan 1"]


def test_views_over_time_request_is_sorted_by_date(report_responses):
    client = FakeGA4Client(report_responses)
    points = fetch_views_over_time(client, *ARGS)

    assert len(points) == 2
    order = client.requests[0].order_bys[0]
    assert order.dimension.dimension_name == "date"
    assert not order.desc


def test_to_frame_fills_missing_communities():
    points = reshape([("20260116", "Gemini", 2), ("20260117", "Royal Oak", 5)])
    df = to_frame(points)

    assert list(df["date"]) == ["Jan 16", "Jan 17"]
    assert list(df["royalOak"]) == [0, 5]
    assert list(df["total"]) == [2, 5]


def test_clicks_by_day_of_week_starts_on_monday(report_responses):
    days = fetch_clicks_by_day_of_week(FakeGA4Client(report_responses), *ARGS)
    assert [(d.day, d.clicks) for d in days] == [("Monday", 9), ("Wednesday", 7), ("Sunday", 5)]


def test_avg_session_duration(report_responses):
    assert fetch_avg_session_duration(FakeGA4Client(report_responses), *ARGS) == "01:35"
    assert fetch_avg_session_duration(FakeGA4Client({}), *ARGS) == "00:00"


def test_device_breakdown_capitalises_labels(report_responses):
    items = fetch_breakdown(FakeGA4Client(report_responses), *ARGS, dimension="deviceCategory")
    assert [(i.label, i.users, i.percentage) for i in items] == [("Desktop", 60, 60.0), ("Mobile", 40, 40.0)]


def test_country_breakdown_is_limited(report_responses):
    client = FakeGA4Client(report_responses)
    fetch_breakdown(client, *ARGS, dimension="country")
    assert client.requests[0].limit == 10


def test_traffic_sources(report_responses):
    sources = fetch_traffic_sources(FakeGA4Client(report_responses), *ARGS)
    assert [(s.source, s.medium, s.percentage) for s in sources] == [
        ("google", "organic", 75.0),
        ("(direct)", "(none)", 25.0),
    ]


def test_available_clients_skips_unset():
    client = FakeGA4Client(
        {
            ("customEvent:c_client",): [
                (("Pacesetter Homes",), (10,)),
                (("(not set)",), (4,)),
                (("-",), (3,)),
                (("Coastal Bend Lots",), (2,)),
            ]
        }
    )
    assert fetch_available_clients(client, "123456789") == ["Pacesetter Homes", "Coastal Bend Lots"]
    assert client.requests[0].date_ranges[0].start_date == "90daysAgo"
