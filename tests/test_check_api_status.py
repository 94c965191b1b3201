from types import SimpleNamespace
from unittest.mock import MagicMock

import check_api_status
from reporting.config import Settings


def patch_environment(monkeypatch, settings, status_code=200):
    monkeypatch.setattr(check_api_status, "load_settings", lambda: settings)
    credentials = MagicMock(token="token-123")
    monkeypatch.setattr(
        check_api_status.service_account.Credentials,
        "from_service_account_info",
        MagicMock(return_value=credentials),
    )
    post = MagicMock(return_value=SimpleNamespace(status_code=status_code, text="{}"))
    monkeypatch.setattr(check_api_status.requests, "post", post)
    return post


def test_reports_success(monkeypatch, settings, capsys):
    post = patch_environment(monkeypatch, settings)

    assert check_api_status.main() == 0
    url = post.call_args.args[0]
    assert url.endswith("properties/123456789:runReport")
    assert post.call_args.kwargs["headers"]["Authorization"] == "Bearer token-123"
    assert "API is accessible" in capsys.readouterr().out


def test_reports_permission_problem(monkeypatch, settings, capsys):
    patch_environment(monkeypatch, settings, status_code=403)

    assert check_api_status.main() == 1
    assert "Permission denied" in capsys.readouterr().out


def test_missing_configuration(monkeypatch, capsys):
    post = patch_environment(monkeypatch, Settings())

    assert check_api_status.main() == 1
    post.assert_not_called()
    assert "GA4_PROPERTY_ID is not set" in capsys.readouterr().out
