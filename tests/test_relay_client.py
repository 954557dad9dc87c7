"""Tests for the namsan-relay command line client."""
import json

import httpx
import pytest

from namsan_portal.cli import relay_client


@pytest.fixture
def relay(monkeypatch):
    """Run main() with argv against a fake server; returns (run, requests)."""
    requests = []
    routes = {}
    real_client = httpx.Client

    def handler(request):
        requests.append(request)
        route = routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": "Not Found"})
        return route(request)

    def client_factory(**kwargs):
        return real_client(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(relay_client.httpx, "Client", client_factory)

    def run(*argv):
        monkeypatch.setattr("sys.argv", ["namsan-relay", *argv])
        return relay_client.main()

    run.routes = routes
    return run, requests


def test_health(relay, capsys):
    run, _ = relay
    run.routes[("GET", "/")] = lambda request: httpx.Response(200, json={"status": "ok"})

    assert run("health") == 0
    assert json.loads(capsys.readouterr().out) == {"status": "ok"}


def test_chat_prints_streamed_text(relay, capsys):
    run, requests = relay
    body = (
        b'data: {"choices":[{"delta":{"content":"Hello"}}]}\n\n'
        b'data: {"choices":[{"delta":{"content":" world"}}]}\n\n'
        b"data: [DONE]\n\n"
    )
    run.routes[("POST", "/chat")] = lambda request: httpx.Response(
        200, content=body, headers={"content-type": "text/event-stream"}
    )

    assert run("--token", "tok", "chat", "hi") == 0
    assert capsys.readouterr().out == "Hello world\n"
    assert requests[0].headers["Authorization"] == "Bearer tok"
    assert json.loads(requests[0].content) == {"messages": [{"role": "user", "content": "hi"}]}


def test_http_errors_exit_with_1(relay, capsys):
    run, _ = relay
    run.routes[("POST", "/market-news")] = lambda request: httpx.Response(
        401, json={"success": False, "error": "Authorization required"}
    )

    assert run("market-news") == 1
    err = capsys.readouterr().err
    assert "HTTP error: 401" in err
    assert "Authorization required" in err


def test_notify_content_posts_a_composed_newsletter(relay, capsys):
    run, requests = relay
    run.routes[("POST", "/send-newsletter")] = lambda request: httpx.Response(
        200, json={"success": True, "sentCount": 4, "totalRecipients": 4}
    )

    assert run("notify-content", "blog", "added", "--title-ko", "새 글") == 0
    sent = json.loads(requests[0].content)
    assert sent["subject"] == "[Namsan Partners] 블로그 - 새로운 콘텐츠가 추가되었습니다"
    assert "새 글" in sent["htmlContent"]
    assert "4 recipients" in capsys.readouterr().out


def test_popup_action(relay, capsys):
    run, requests = relay
    run.routes[("POST", "/popups/p-1/action")] = lambda request: httpx.Response(
        200, json={"success": True, "button_link": "https://portal.test/x"}
    )

    assert run("popup", "action", "p-1") == 0
    assert json.loads(capsys.readouterr().out)["button_link"] == "https://portal.test/x"


def test_stock_prices_parses_code_and_name(relay, capsys):
    run, requests = relay
    run.routes[("POST", "/fetch-stock-prices")] = lambda request: httpx.Response(
        200,
        json={
            "success": True,
            "data": [
                {"stockCode": "005930", "stockName": "Samsung", "currentPrice": 71500.0, "error": None},
                {"stockCode": "035720", "stockName": "", "currentPrice": None,
                 "error": "No data from Yahoo Finance"},
            ],
        },
    )

    assert run("stock-prices", "005930:Samsung", "035720") == 0
    assert json.loads(requests[0].content) == {
        "stockCodes": [{"code": "005930", "name": "Samsung"}, {"code": "035720", "name": ""}]
    }
    out = capsys.readouterr().out
    assert "71500.0" in out
    assert "FAIL" in out
