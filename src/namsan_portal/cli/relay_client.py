"""CLI to call the portal relays from a terminal.

Usage:
  namsan-relay health
  namsan-relay --token $PORTAL_TOKEN chat "What moved KOSPI today?"
  namsan-relay market-news
  namsan-relay newsletter --subject "Weekly" --html-file weekly.html
  namsan-relay notify-content blog added --title-ko "새 글" --title-en "New post"
  namsan-relay indices --auto-update
  namsan-relay stock-prices 005930:삼성전자 035720
"""
import argparse
import json
import os
import sys
from pathlib import Path

import httpx

from namsan_portal.config import get_settings
from namsan_portal.services.templates import (ContentAction, ContentType,
                                              compose_content_notification)


def print_json(data: object) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def _print_event_stream(response: httpx.Response) -> None:
    """Print assistant text from an OpenAI-style SSE stream as it arrives."""
    for line in response.iter_lines():
        if not line.startswith("data: "):
            continue
        payload = line.removeprefix("data: ").strip()
        if payload == "[DONE]":
            break
        try:
            chunk = json.loads(payload)
        except json.JSONDecodeError:
            continue
        delta = (chunk.get("choices") or [{}])[0].get("delta") or {}
        print(delta.get("content") or "", end="", flush=True)
    print()


def _stream(client: httpx.Client, path: str, body: dict) -> int:
    with client.stream("POST", path, json=body) as r:
        if r.is_error:
            r.read()
            r.raise_for_status()
        _print_event_stream(r)
    return 0


def cmd_health(client: httpx.Client, _: argparse.Namespace) -> int:
    r = client.get("/")
    r.raise_for_status()
    print_json(r.json())
    return 0


def cmd_chat(client: httpx.Client, args: argparse.Namespace) -> int:
    return _stream(client, "/chat", {"messages": [{"role": "user", "content": args.message}]})


def cmd_summarize(client: httpx.Client, args: argparse.Namespace) -> int:
    body = {
        "title": args.title,
        "summary": args.summary,
        "category": args.category,
        "language": args.language,
    }
    return _stream(client, "/summarize-report", body)


def cmd_market_news(client: httpx.Client, _: argparse.Namespace) -> int:
    r = client.post("/market-news")
    r.raise_for_status()
    data = r.json()
    print(data["content"])
    for i, url in enumerate(data.get("citations") or [], start=1):
        print(f"[{i}] {url}")
    return 0


def cmd_stock_news(client: httpx.Client, _: argparse.Namespace) -> int:
    r = client.post("/stock-pick-news")
    r.raise_for_status()
    print_json(r.json())
    return 0


def cmd_newsletter(client: httpx.Client, args: argparse.Namespace) -> int:
    body = {
        "subject": args.subject,
        "htmlContent": Path(args.html_file).read_text(encoding="utf-8"),
    }
    if args.newsletter_id:
        body["newsletterId"] = args.newsletter_id
    r = client.post("/send-newsletter", json=body)
    r.raise_for_status()
    print_json(r.json())
    return 0


def cmd_notify_content(client: httpx.Client, args: argparse.Namespace) -> int:
    notice = compose_content_notification(
        ContentType(args.content_type),
        ContentAction(args.action),
        args.title_ko,
        title_en=args.title_en,
        summary_ko=args.summary_ko,
        portal_url=get_settings().portal_url,
    )
    r = client.post(
        "/send-newsletter",
        json={"subject": notice.subject, "htmlContent": notice.html_content},
    )
    r.raise_for_status()
    data = r.json()
    print(f"Notification sent: {args.content_type} {args.action}, {data.get('sentCount')} recipients")
    return 0


def cmd_indices(client: httpx.Client, args: argparse.Namespace) -> int:
    r = client.post("/fetch-market-indices", json={"autoUpdate": args.auto_update})
    r.raise_for_status()
    for row in r.json()["data"]:
        value = row.get("currentValue")
        print(f"{row['symbol']:<12} {value if value is not None else 'FAIL':>12}  {row.get('error') or ''}")
    return 0


def _parse_stock_code(value: str) -> dict:
    code, _, name = value.partition(":")
    return {"code": code, "name": name}


def cmd_stock_prices(client: httpx.Client, args: argparse.Namespace) -> int:
    r = client.post("/fetch-stock-prices", json={"stockCodes": args.codes})
    r.raise_for_status()
    for row in r.json()["data"]:
        price = row.get("currentPrice")
        print(f"{row['stockCode']:<8} {row['stockName']:<16} {price if price is not None else 'FAIL':>12}  {row.get('error') or ''}")
    return 0


def cmd_popup_current(client: httpx.Client, args: argparse.Namespace) -> int:
    params = {"language": args.language}
    if args.tz:
        params["tz"] = args.tz
    r = client.get("/popups/current", params=params)
    r.raise_for_status()
    print_json(r.json())
    return 0


def cmd_popup_dismiss(client: httpx.Client, args: argparse.Namespace) -> int:
    r = client.post(f"/popups/{args.popup_id}/dismiss")
    r.raise_for_status()
    print_json(r.json())
    return 0


def cmd_popup_action(client: httpx.Client, args: argparse.Namespace) -> int:
    r = client.post(f"/popups/{args.popup_id}/action")
    r.raise_for_status()
    print_json(r.json())
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Call the Namsan portal relays.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--base-url",
        default="http://127.0.0.1:8001",
        help="API base URL (default: http://127.0.0.1:8001)",
    )
    parser.add_argument(
        "--token",
        default=os.getenv("PORTAL_TOKEN"),
        help="Bearer access token (default: $PORTAL_TOKEN)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=60.0,
        help="Request timeout in seconds (default: 60)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True, help="Command")

    subparsers.add_parser("health", help="GET / health check")

    p = subparsers.add_parser("chat", help="POST /chat (streams the reply)")
    p.add_argument("message", help="User message")

    p = subparsers.add_parser("summarize", help="POST /summarize-report (streams the summary)")
    p.add_argument("title", help="Report title")
    p.add_argument("--category", default="", help="Report category")
    p.add_argument("--summary", default=None, help="Existing short summary")
    p.add_argument("--language", choices=["ko", "en"], default="en")

    subparsers.add_parser("market-news", help="POST /market-news")
    subparsers.add_parser("stock-news", help="POST /stock-pick-news (refreshes stored news)")

    p = subparsers.add_parser("newsletter", help="POST /send-newsletter (admin)")
    p.add_argument("--subject", required=True)
    p.add_argument("--html-file", required=True, help="File with the newsletter HTML body")
    p.add_argument("--newsletter-id", default=None, help="Newsletter row to mark as sent")

    p = subparsers.add_parser("notify-content", help="Announce a content change to approved users (admin)")
    p.add_argument("content_type", choices=[t.value for t in ContentType])
    p.add_argument("action", choices=[a.value for a in ContentAction])
    p.add_argument("--title-ko", required=True)
    p.add_argument("--title-en", default=None)
    p.add_argument("--summary-ko", default=None)

    p = subparsers.add_parser("indices", help="POST /fetch-market-indices")
    p.add_argument("--auto-update", action="store_true", help="Mail failures to the admin")

    p = subparsers.add_parser("stock-prices", help="POST /fetch-stock-prices")
    p.add_argument("codes", nargs="+", type=_parse_stock_code, metavar="CODE[:NAME]")

    popup = subparsers.add_parser("popup", help="Popup routes (/popups)")
    popup_sub = popup.add_subparsers(dest="popup_cmd", required=True)
    p = popup_sub.add_parser("current", help="GET /popups/current")
    p.add_argument("--language", choices=["ko", "en"], default="ko")
    p.add_argument("--tz", default=None, help="IANA time zone (e.g. Asia/Seoul)")
    p = popup_sub.add_parser("dismiss", help="POST /popups/{popup_id}/dismiss")
    p.add_argument("popup_id")
    p = popup_sub.add_parser("action", help="POST /popups/{popup_id}/action")
    p.add_argument("popup_id")

    args = parser.parse_args()

    handlers = {
        "health": cmd_health,
        "chat": cmd_chat,
        "summarize": cmd_summarize,
        "market-news": cmd_market_news,
        "stock-news": cmd_stock_news,
        "newsletter": cmd_newsletter,
        "notify-content": cmd_notify_content,
        "indices": cmd_indices,
        "stock-prices": cmd_stock_prices,
        "popup": {"current": cmd_popup_current, "dismiss": cmd_popup_dismiss,
                  "action": cmd_popup_action},
    }
    handler = handlers[args.command]
    if isinstance(handler, dict):
        handler = handler[args.popup_cmd]

    headers = {"Authorization": f"Bearer {args.token}"} if args.token else {}
    try:
        with httpx.Client(
            base_url=args.base_url.rstrip("/"), headers=headers, timeout=args.timeout
        ) as client:
            return handler(client, args)
    except httpx.HTTPStatusError as e:
        print(f"HTTP error: {e.response.status_code}", file=sys.stderr)
        if e.response.content:
            try:
                print(e.response.json(), file=sys.stderr)
            except ValueError:
                print(e.response.text, file=sys.stderr)
        return 1
    except httpx.RequestError as e:
        print(f"Request error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
