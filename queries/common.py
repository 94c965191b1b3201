"""
Shared pieces for the GA4 query modules: client construction, filters and
row accessors.
"""

from __future__ import annotations

import argparse
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

import pandas as pd
from google.analytics.data_v1beta import BetaAnalyticsDataClient
from google.analytics.data_v1beta.types import DateRange, Filter, FilterExpression, FilterExpressionList
from google.auth import exceptions as auth_exceptions
from google.oauth2 import service_account

from reporting.config import ConfigurationError, Settings

SCOPES = ["https://www.googleapis.com/auth/analytics.readonly"]

CLIENT_DIMENSION = "customEvent:c_client"
COMMUNITY_DIMENSION = "customEvent:c_community"
URL_PATH_DIMENSION = "customEvent:c_urlpath"
LOT_DIMENSION = "customEvent:c_lot"
CATEGORY_DIMENSION = "customEvent:c_category"
LOT_CLICK_CATEGORY = "maps-openInfoWin"

COMMUNITY_LIMIT = 100
TIME_SERIES_LIMIT = 10000


def create_client(settings: Settings) -> BetaAnalyticsDataClient:
    """
    Build a GA4 Data API client from the configured service account.

    Raises:
        ConfigurationError: If no usable credentials are configured, or
            google-auth rejects them.
    """
    info = settings.service_account_info()
    try:
        credentials = service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
    except (ValueError, auth_exceptions.MalformedError) as exc:
        raise ConfigurationError(
            "Invalid GA4 service account credentials",
            fix=(
                "Check that GOOGLE_SERVICE_ACCOUNT_BASE64 holds a complete service account key file,\n"
                "or that GA4_PRIVATE_KEY is the full PEM key for GA4_CLIENT_EMAIL.\n"
                f"google-auth reported: {exc}"
            ),
        ) from exc
    return BetaAnalyticsDataClient(credentials=credentials)


def property_name(property_id: str) -> str:
    return f"properties/{property_id}"


def date_ranges(start_date: str, end_date: str) -> List[DateRange]:
    return [DateRange(start_date=start_date, end_date=end_date)]


def exact_filter(field_name: str, value: str) -> FilterExpression:
    return FilterExpression(
        filter=Filter(
            field_name=field_name,
            string_filter=Filter.StringFilter(match_type=Filter.StringFilter.MatchType.EXACT, value=value),
        )
    )


def in_list_filter(field_name: str, values: Sequence[str]) -> FilterExpression:
    return FilterExpression(
        filter=Filter(field_name=field_name, in_list_filter=Filter.InListFilter(values=list(values)))
    )


def all_of(expressions: Sequence[FilterExpression]) -> FilterExpression:
    if len(expressions) == 1:
        return expressions[0]
    return FilterExpression(and_group=FilterExpressionList(expressions=list(expressions)))


def client_filter(client_name: str) -> FilterExpression:
    return exact_filter(CLIENT_DIMENSION, client_name)


def lot_click_filter(client_name: str, communities: Optional[Iterable[str]] = None) -> FilterExpression:
    """Lot info-window opens for one client, optionally limited to some communities."""
    expressions = [
        client_filter(client_name),
        exact_filter(CATEGORY_DIMENSION, LOT_CLICK_CATEGORY),
    ]
    wanted = [name for name in (communities or []) if name]
    if wanted:
        expressions.append(in_list_filter(COMMUNITY_DIMENSION, wanted))
    return all_of(expressions)


def dimension_value(row, index: int) -> str:
    values = row.dimension_values
    if index >= len(values):
        return ""
    return values[index].value or ""


def metric_int(row, index: int = 0) -> int:
    values = row.metric_values
    if index >= len(values):
        return 0
    return int(float(values[index].value or 0))


def metric_float(row, index: int = 0) -> float:
    values = row.metric_values
    if index >= len(values):
        return 0.0
    return float(values[index].value or 0)


def base_parser(description: str) -> argparse.ArgumentParser:
    """Argument parser shared by the command-line entry points of the query modules."""
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--client", required=True, help="Client name as tracked in customEvent:c_client")
    parser.add_argument("--start-date", default="28daysAgo", help="Start date (YYYY-MM-DD or GA4 relative like 28daysAgo)")
    parser.add_argument("--end-date", default="today", help="End date (YYYY-MM-DD or GA4 relative like today)")
    parser.add_argument("--output-prefix", help="Save results to <prefix>_<timestamp>.csv")
    return parser


def save_csv(records: List[dict], prefix: str) -> Path:
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    csv_path = Path(f"{prefix}_{ts}.csv")
    pd.DataFrame(records).to_csv(csv_path, index=False)
    return csv_path
