"""Tests for the sidecar entry point (dispatch and message loop)."""

from __future__ import annotations

import json
from datetime import date
from io import StringIO
from unittest.mock import patch

import numpy as np
import pytest

from silvertracker.config import Settings
from silvertracker.main import _SidecarEncoder, build_session, dispatch, main, serve
from silvertracker.market.provider import YahooProvider


class FakeTimer:
    def __init__(self, interval, callback):
        self.interval = interval
        self.callback = callback

    def start(self):
        pass

    def cancel(self):
        pass


@pytest.fixture
def session(sample_quote):
    settings = Settings(provider="yahoo", db_path=None)
    session = build_session(settings)
    session.view_model._timer_factory = FakeTimer
    with patch.object(YahooProvider, "fetch_quote", return_value=sample_quote):
        session.view_model.start()
        yield session
    session.close()


def _form(**overrides):
    params = {
        "name": "Britannia",
        "purchase_price": 36.0,
        "silver_price_at_purchase": 30.0,
        "weight": 1,
        "weight_unit": "oz",
        "purchase_date": "2024-06-01",
    }
    params.update(overrides)
    return params


class TestBuildSession:
    def test_wires_collaborators(self):
        session = build_session(Settings(provider="yahoo", db_path=None))
        try:
            assert isinstance(session.provider, YahooProvider)
            assert session.view_model.conn is session.conn
            assert session.view_model.refresh_seconds == 30.0
        finally:
            session.close()

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown provider"):
            build_session(Settings(provider="kitco", db_path=None))

    def test_missing_api_key(self, monkeypatch):
        monkeypatch.delenv("GOLDAPI_API_KEY", raising=False)
        with pytest.raises(EnvironmentError, match="GOLDAPI_API_KEY"):
            build_session(Settings(provider="goldapi", db_path=None))


class TestDispatch:
    """Tests for the dispatch function."""

    def test_unknown_method_raises(self, session):
        with pytest.raises(ValueError, match="Unknown method"):
            dispatch(session, "nonexistent.method", {})

    def test_unknown_method_includes_name(self, session):
        with pytest.raises(ValueError, match=r"foo\.bar"):
            dispatch(session, "foo.bar", {})

    def test_current_quote(self, session):
        result = dispatch(session, "quote.current", {})
        assert result["price"] == 30.0
        assert result["is_fallback"] is False

    def test_portfolio_state(self, session):
        state = dispatch(session, "portfolio.state", {})
        assert state["weekly_change"] == 3.45
        assert state["weekly_change_simulated"] is False
        assert state["portfolio"]["holdings"] == []

    def test_new_form_prefills_spot(self, session):
        form = dispatch(session, "portfolio.new_form", {})
        assert form["silver_price_at_purchase"] == 30.0
        assert form["weight_unit"] == "oz"

    def test_add_holding(self, session):
        result = dispatch(session, "portfolio.add_holding", _form())
        assert result["ok"] is True
        assert result["holding"]["silver_weight_oz"] == 1.0
        state = dispatch(session, "portfolio.state", {})
        assert state["portfolio"]["total_premium_paid"] == 6.0

    def test_add_holding_rejected(self, session):
        result = dispatch(session, "portfolio.add_holding", _form(weight="heavy"))
        assert result["ok"] is False
        assert result["errors"] == ["weight must be a finite number greater than 0"]

    def test_delete_holding(self, session):
        added = dispatch(session, "portfolio.add_holding", _form())
        result = dispatch(
            session, "portfolio.delete_holding", {"id": added["holding"]["id"]}
        )
        assert result["status"] == "ok"
        assert dispatch(session, "portfolio.state", {})["portfolio"]["holdings"] == []

    def test_reload(self, session):
        dispatch(session, "portfolio.add_holding", _form())
        assert dispatch(session, "portfolio.reload", {}) == {"status": "ok", "error": ""}

    def test_history(self, session):
        history = dispatch(session, "quote.history", {"days": 3})
        assert len(history) == 4
        assert all(q["source"] == "simulated" for q in history)

    def test_refresh(self, session):
        state = dispatch(session, "quote.refresh", {})
        assert state["quote"]["price"] == 30.0
        assert state["is_refreshing"] is False

    def test_price_history_since(self, session):
        result = dispatch(
            session, "price_history.since", {"since": "2024-06-01T00:00:00+00:00"}
        )
        assert result["status"] == "ok"
        assert result["rows"][0]["price_per_oz"] == 30.0

    def test_price_history_bad_timestamp(self, session):
        with pytest.raises(ValueError, match="ISO-8601"):
            dispatch(session, "price_history.since", {"since": "last week"})


class TestEncoder:
    def test_dates_and_numpy(self):
        payload = {
            "d": date(2024, 6, 1),
            "i": np.int64(3),
            "f": np.float64(1.5),
            "a": np.array([1, 2]),
        }
        assert json.loads(json.dumps(payload, cls=_SidecarEncoder)) == {
            "d": "2024-06-01",
            "i": 3,
            "f": 1.5,
            "a": [1, 2],
        }


class TestServe:
    """Tests for the stdin/stdout message loop."""

    def _run(self, session, text):
        stdout = StringIO()
        with patch("sys.stdin", StringIO(text)), patch("sys.stdout", stdout):
            serve(session)
        return [json.loads(line) for line in stdout.getvalue().splitlines()]

    def test_valid_request_returns_response(self, session):
        request = json.dumps({"id": "1", "method": "quote.current", "params": {}})
        [response] = self._run(session, request + "\n")
        assert response["id"] == "1"
        assert response["result"]["price"] == 30.0

    def test_invalid_json_returns_error(self, session):
        [response] = self._run(session, "not valid json\n")
        assert response["id"] == "unknown"
        assert "error" in response

    def test_missing_method_returns_error(self, session):
        [response] = self._run(session, json.dumps({"id": "2"}) + "\n")
        assert response["id"] == "2"
        assert "error" in response

    def test_unknown_method_returns_error(self, session):
        request = json.dumps({"id": "3", "method": "nope", "params": {}})
        [response] = self._run(session, request + "\n")
        assert "Unknown method" in response["error"]["message"]

    def test_empty_lines_are_skipped(self, session):
        request = json.dumps({"id": "4", "method": "portfolio.state", "params": {}})
        responses = self._run(session, "\n\n" + request + "\n\n")
        assert len(responses) == 1

    def test_multiple_requests(self, session):
        lines = [
            json.dumps({"id": str(i), "method": "quote.current", "params": {}})
            for i in range(3)
        ]
        responses = self._run(session, "\n".join(lines) + "\n")
        assert [r["id"] for r in responses] == ["0", "1", "2"]


class TestMain:
    def test_runs_until_eof(self, monkeypatch):
        monkeypatch.setenv("SILVERTRACKER_PROVIDER", "yahoo")
        monkeypatch.setenv("SILVERTRACKER_DB_PATH", ":memory:")
        request = json.dumps({"id": "1", "method": "quote.current", "params": {}})
        stdout = StringIO()
        with (
            patch("silvertracker.main.PortfolioViewModel") as vm_cls,
            patch("sys.stdin", StringIO(request + "\n")),
            patch("sys.stdout", stdout),
        ):
            vm_cls.return_value.quote.to_dict.return_value = {"price": 30.0}
            main()

        vm_cls.return_value.start.assert_called_once()
        vm_cls.return_value.close.assert_called_once()
        response = json.loads(stdout.getvalue().strip())
        assert response["result"] == {"price": 30.0}
