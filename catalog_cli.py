#!/usr/bin/env python3
# catalog_cli.py - simple interactive console client for the /rooms/catalog endpoint
# Usage:
#   python catalog_cli.py [--url http://127.0.0.1:8000] [--guests 2] [--check-in 2025-01-10]
#
# Notes:
# - Type a search term (e.g. "villa" or "Kuala Lumpur, Malaysia") and press Enter.
# - /next and /prev move between pages of the last search.
# - /guests N, /max N, /date YYYY-MM-DD set filters; "/max" or "/date" alone clears them.
# - /avail ROOM_TYPE_ID CHECK_IN CHECK_OUT checks dated availability.
# - Type /exit or Ctrl+C to quit.

import argparse
import os
import requests

DEFAULT_URL = os.environ.get("CATALOG_URL", "http://127.0.0.1:8000")
CATALOG_EP = "/rooms/catalog"
AVAIL_EP = "/rooms/check-availability"
FILTER_CMDS = {"/guests": "guests", "/max": "max_price", "/date": "check_in"}
USAGE = "commands: /next, /prev, /guests N, /max N, /date YYYY-MM-DD, /avail ID IN OUT, /exit"


def parse_args():
    ap = argparse.ArgumentParser(description="Interactive hotel catalog CLI")
    ap.add_argument("--url", default=DEFAULT_URL, help="Base URL, default %(default)s")
    ap.add_argument("--guests", type=int, help="Number of guests")
    ap.add_argument("--max-price", type=float, help="Maximum nightly price")
    ap.add_argument("--check-in", help="Check-in date YYYY-MM-DD")
    ap.add_argument("--page-size", type=int, default=9)
    return ap.parse_args()


def get_catalog(base_url: str, params: dict) -> dict:
    url = base_url.rstrip("/") + CATALOG_EP
    clean = {k: v for k, v in params.items() if v is not None and v != ""}
    try:
        r = requests.get(url, params=clean, timeout=30)
        r.raise_for_status()
        return r.json()
    except requests.exceptions.RequestException as e:
        return {"error": str(e)}


def post_availability(base_url: str, room_type_id: int, check_in: str, check_out: str) -> dict:
    url = base_url.rstrip("/") + AVAIL_EP
    payload = {"room_type_id": room_type_id, "check_in": check_in, "check_out": check_out}
    try:
        r = requests.post(url, json=payload, timeout=30)
        r.raise_for_status()
        return r.json()
    except requests.exceptions.RequestException as e:
        return {"error": str(e)}


def format_page(obj: dict) -> str:
    if not isinstance(obj, dict):
        return str(obj)
    if "error" in obj:
        return f"[error] {obj['error']}"
    lines = [f"[warn] {w['field']}: {w['message']}" for w in obj.get("warnings") or []]
    if obj.get("search_error"):
        lines.append(obj["search_error"])
        return "\n".join(lines)

    avail = obj.get("available_rooms") or {}
    for rt in obj.get("items") or []:
        hotel = rt.get("hotel") or {}
        where = f"{hotel.get('name')}, {hotel.get('city')}" if hotel else "-"
        free = avail.get(str(rt["room_type_id"]), 0)
        lines.append(
            f"#{rt['room_type_id']:<4} {rt['name']} ({where}) "
            f"occ {rt['occupancy']}  {rt['base_price']:.0f}  free {free}"
        )
    if not obj.get("items"):
        lines.append("No rooms found.")
    lines.append(
        f"page {obj.get('current_page')}/{obj.get('total_pages')}  ({obj.get('total_count')} room types)"
    )
    return "\n".join(lines)


def parse_filter_command(msg: str):
    """Map "/guests 2" to ("guests", "2"). A bare command clears the filter; unknown commands give None."""
    cmd, _, value = msg.partition(" ")
    key = FILTER_CMDS.get(cmd.lower())
    if key is None:
        return None
    return key, value.strip() or None


def format_availability(obj: dict) -> str:
    if "error" in obj:
        return f"[error] {obj['error']}"
    if obj.get("message"):
        return f"not available: {obj['message']}"
    state = "available" if obj.get("available") else "fully booked"
    return f"{state} ({obj.get('count', 0)} rooms free)"


def main():
    args = parse_args()
    base_url = args.url
    params = {
        "search_term": "",
        "guests": args.guests,
        "max_price": args.max_price,
        "check_in": args.check_in,
        "page": 1,
        "page_size": args.page_size,
    }

    print(f"Catalog CLI ready. Base URL: {base_url}")
    print("Type a search term and press Enter. Commands: /next, /prev, /guests, /max, /date, /avail, /exit")

    while True:
        try:
            msg = input("> ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nbye")
            break

        if msg.lower() in ("/exit", "/quit"):
            print("bye")
            break
        cmd = msg.split(" ", 1)[0].lower()
        if msg.lower() == "/next":
            params["page"] += 1
        elif msg.lower() == "/prev":
            params["page"] = max(1, params["page"] - 1)
        elif cmd == "/avail":
            parts = msg.split()
            if len(parts) != 4 or not parts[1].isdigit():
                print("usage: /avail ROOM_TYPE_ID YYYY-MM-DD YYYY-MM-DD")
                continue
            print(format_availability(post_availability(base_url, int(parts[1]), parts[2], parts[3])))
            continue
        elif msg.startswith("/"):
            parsed = parse_filter_command(msg)
            if parsed is None:
                print(USAGE)
                continue
            key, value = parsed
            params[key] = value
            params["page"] = 1
        else:
            params["search_term"] = msg
            params["page"] = 1

        print(format_page(get_catalog(base_url, params)))


if __name__ == "__main__":
    main()
