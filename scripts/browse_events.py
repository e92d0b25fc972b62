# scripts/browse_events.py
"""
Terminal browser for the event log, paging through the running API.
Usage: python scripts/browse_events.py --url http://127.0.0.1:3000 --user alice
Keys:  n = next page, p = previous page, r = first page, q = quit
"""

import sys
import os
import argparse
import asyncio
import getpass
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from attendance_api.client.api_client import ApiError, AttendanceApiClient
from attendance_api.client.pager import EventPager


def show(pager: EventPager):
    print("\n" + "=" * 72)
    for ev in pager.page.rows if pager.page else []:
        payload = ev.payload if len(ev.payload) <= 40 else ev.payload[:40] + "…"
        print(f"{ev.timestamp:<26} {ev.type_code:<12} {ev.created_by:<12} {payload}")
    if not pager.page or not pager.page.rows:
        print("No results.")
    print("-" * 72)
    print(f"page {pager.depth + 1} | [p]rev {'on' if pager.has_prev else 'off'} | "
          f"[n]ext {'on' if pager.has_next else 'off'} | [r]eset | [q]uit")


async def run(args):
    password = args.password or getpass.getpass("Password: ")
    async with AttendanceApiClient(args.url) as client:
        try:
            user = await client.login(args.user, password)
        except ApiError as e:
            print(f"❌ Login failed: {e.message}")
            return 1
        print(f"✅ Signed in as {user['name']} roles={user['roles']}")

        pager = EventPager.for_client(client, limit=args.limit, type_code=args.type, created_by=args.created_by)
        await pager.reset()
        show(pager)
        try:
            while True:
                key = input("> ").strip().lower()
                if key == "q":
                    break
                if key == "n":
                    await pager.go_next()
                elif key == "p":
                    await pager.go_prev()
                elif key == "r":
                    await pager.reset()
                show(pager)
        finally:
            await client.logout()
    return 0


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--url", default="http://127.0.0.1:3000")
    parser.add_argument("--user", required=True)
    parser.add_argument("--password", default="")
    parser.add_argument("--limit", type=int, default=10)
    parser.add_argument("--type", help="Filter by event type code")
    parser.add_argument("--created-by", dest="created_by", help="Filter by author")
    sys.exit(asyncio.run(run(parser.parse_args())))


if __name__ == "__main__":
    main()
