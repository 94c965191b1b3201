from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Tuple

from flask import Flask, current_app, jsonify, request

from queries.clients import fetch_available_clients
from queries.common import create_client
from queries.top_lots import fetch_top_lots
from reporting.builder import ReportError, build_market_report
from reporting.config import ConfigurationError, Settings, configure_logging, decode_service_account, load_settings

logger = logging.getLogger(__name__)

DATE_INPUT_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%m-%d-%Y")
LOTS_LIMIT = 50
DEMO_CLIENTS = ["Pacesetter Homes", "Demo Client"]


class BadRequest(ValueError):
    pass


def normalize_date_input(value: str | None) -> str | None:
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    for pattern in DATE_INPUT_FORMATS:
        try:
            parsed = datetime.strptime(text, pattern)
            return parsed.strftime("%Y-%m-%d")
        except ValueError:
            continue
    return None


def resolve_date_range(args, lookback_days: int, today: date | None = None) -> Tuple[str, str]:
    """
    Read `start_date`/`end_date` query parameters.

    Missing values default to the last `lookback_days` days, today included.
    """
    today = today or date.today()
    raw_start = args.get("start_date")
    raw_end = args.get("end_date")

    end_date = normalize_date_input(raw_end) if raw_end else today.isoformat()
    if end_date is None:
        raise BadRequest(f"Invalid end_date '{raw_end}'. Expected YYYY-MM-DD.")

    if raw_start:
        start_date = normalize_date_input(raw_start)
        if start_date is None:
            raise BadRequest(f"Invalid start_date '{raw_start}'. Expected YYYY-MM-DD.")
    else:
        end = datetime.strptime(end_date, "%Y-%m-%d").date()
        start_date = (end - timedelta(days=lookback_days - 1)).isoformat()

    if start_date > end_date:
        raise BadRequest(f"start_date {start_date} is after end_date {end_date}.")
    return start_date, end_date


def parse_communities(value: str | None) -> List[str] | None:
    if not value:
        return None
    communities = [c.strip() for c in value.split(",") if c.strip()]
    return communities or None


def describe_configuration(settings: Settings) -> Dict[str, Any]:
    """Which settings are present, without exposing secrets."""
    decoded: Dict[str, Any] | None = None
    if settings.credentials_base64:
        try:
            info = decode_service_account(settings.credentials_base64)
            decoded = {
                "valid": True,
                "client_email": info.get("client_email"),
                "project_id": info.get("project_id"),
                "has_private_key": bool(info.get("private_key")),
            }
        except ConfigurationError as exc:
            decoded = {"valid": False, "error": str(exc)}

    private_key = settings.private_key or ""
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "config": {
            "GA4_PROPERTY_ID": {"set": bool(settings.property_id), "value": settings.property_id},
            "GOOGLE_SERVICE_ACCOUNT_BASE64": {
                "set": bool(settings.credentials_base64),
                "length": len(settings.credentials_base64 or ""),
                "decoded": decoded,
            },
            "GA4_CLIENT_EMAIL": {"set": bool(settings.client_email), "value": settings.client_email},
            "GA4_PRIVATE_KEY": {
                "set": bool(private_key),
                "length": len(private_key),
                "startsCorrectly": private_key.startswith("-----BEGIN"),
            },
        },
        "allConfigured": settings.has_credentials,
    }


def get_settings() -> Settings:
    return current_app.config["SETTINGS"]


def get_ga4_client():
    """One GA4 client per app; built lazily so a missing key only fails the requests that need it."""
    client = current_app.extensions.get("ga4_client")
    if client is None:
        client = current_app.config["CLIENT_FACTORY"](get_settings())
        current_app.extensions["ga4_client"] = client
    return client


def create_app(settings: Settings | None = None, client_factory=create_client) -> Flask:
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    app = Flask(__name__)
    app.config["SETTINGS"] = settings
    app.config["CLIENT_FACTORY"] = client_factory

    @app.errorhandler(BadRequest)
    def handle_bad_request(exc: BadRequest):
        return jsonify({"error": str(exc)}), 400

    @app.route("/api/clients", methods=["GET"])
    def api_clients():
        settings = get_settings()
        if not settings.has_credentials:
            return jsonify({"clients": DEMO_CLIENTS, "_mock": True})

        try:
            clients = fetch_available_clients(get_ga4_client(), settings.property_id)
        except Exception as exc:
            logger.exception("Error fetching clients")
            return jsonify({"error": "Failed to fetch clients", "details": str(exc)}), 500
        return jsonify({"clients": clients})

    @app.route("/api/lots", methods=["GET"])
    def api_lots():
        settings = get_settings()
        client_name = (request.args.get("client") or "").strip()
        if not client_name:
            return jsonify({"error": "Client name is required"}), 400

        start_date, end_date = resolve_date_range(request.args, settings.lookback_days)
        communities = parse_communities(request.args.get("communities"))

        if not settings.has_credentials:
            return jsonify({"error": "GA4 credentials not configured"}), 500

        logger.info("Fetching lots for %s, communities: %s", client_name, ", ".join(communities or []) or "all")
        try:
            lots = fetch_top_lots(
                get_ga4_client(), settings.property_id, client_name, start_date, end_date, LOTS_LIMIT, communities
            )
        except ConfigurationError as exc:
            logger.error("GA4 configuration error: %s", exc)
            return jsonify({"error": str(exc)}), 500
        except Exception as exc:
            logger.exception("Error fetching lots")
            return jsonify({"error": "Failed to fetch lots", "details": str(exc)}), 500

        return jsonify({"lots": [lot.to_dict() for lot in lots]})

    @app.route("/api/report/<path:client_name>", methods=["GET"])
    def api_report(client_name: str):
        settings = get_settings()
        start_date, end_date = resolve_date_range(request.args, settings.lookback_days)

        if not settings.has_credentials:
            return jsonify({"error": "GA4 credentials not configured"}), 500

        logger.info("Fetching report for %s from %s to %s", client_name, start_date, end_date)
        try:
            report = build_market_report(get_ga4_client(), settings.property_id, client_name, start_date, end_date)
        except ConfigurationError as exc:
            logger.error("GA4 configuration error: %s", exc)
            return jsonify({"error": str(exc)}), 500
        except ReportError as exc:
            logger.exception("Error fetching report")
            return jsonify({"error": "Failed to fetch report", "details": str(exc)}), 500

        return jsonify(report.to_dict())

    @app.route("/api/debug", methods=["GET"])
    def api_debug():
        return jsonify(describe_configuration(get_settings()))

    return app


if __name__ == "__main__":
    try:
        app_settings = load_settings()
    except ConfigurationError as exc:
        raise SystemExit(exc.describe())
    create_app(app_settings).run(host=app_settings.host, port=app_settings.port, debug=app_settings.debug)
