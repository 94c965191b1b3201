#!/usr/bin/env python3
"""Quick script to check that the configured service account can reach the GA4 Data API."""

import sys

import requests
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from queries.common import CLIENT_DIMENSION, SCOPES
from reporting.config import ConfigurationError, load_settings

RUN_REPORT_URL = "https://analyticsdata.googleapis.com/v1beta/properties/{property_id}:runReport"


def main() -> int:
    try:
        settings = load_settings()
        if not settings.property_id:
            raise ConfigurationError("GA4_PROPERTY_ID is not set", fix="Add GA4_PROPERTY_ID=<numeric id> to your .env file.")
        info = settings.service_account_info()
    except ConfigurationError as exc:
        print(f"❌ {exc.describe()}")
        return 1

    credentials = service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
    credentials.refresh(Request())

    headers = {
        "Authorization": f"Bearer {credentials.token}",
        "Content-Type": "application/json",
    }
    payload = {
        "dateRanges": [{"startDate": "7daysAgo", "endDate": "today"}],
        "dimensions": [{"name": CLIENT_DIMENSION}],
        "metrics": [{"name": "eventCount"}],
        "limit": 1,
    }

    response = requests.post(
        RUN_REPORT_URL.format(property_id=settings.property_id), json=payload, headers=headers, timeout=10
    )

    print(f"Service account: {info.get('client_email')}")
    print(f"Status Code: {response.status_code}")
    if response.status_code == 200:
        print("✅ API is accessible!")
        return 0
    if response.status_code == 403:
        print(f"❌ Permission denied: {response.text[:300]}")
        print("Add the service account to GA4 Property Access Management with the Viewer role.")
    elif response.status_code == 400:
        print(f"❌ Bad request: {response.text[:300]}")
        print("Check that the customEvent:c_client dimension is registered on the property.")
    else:
        print(f"Response: {response.text[:200]}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
