# scripts/setup/check_couch.py
"""
Checks that CouchDB is reachable and configured the way the API expects.
Usage: python scripts/setup/check_couch.py
       python scripts/setup/check_couch.py --user alice --password secret
"""

import sys
import os
import argparse
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

import requests
from attendance_api.config import settings


def check_up(base: str) -> dict:
    try:
        resp = requests.get(f"{base}/_up", timeout=5)
        if resp.status_code == 200:
            return {"status": "✅ online"}
        return {"status": f"❌ http_{resp.status_code}"}
    except requests.exceptions.ConnectTimeout:
        return {"status": "❌ timeout", "hint": "CouchDB unreachable — check COUCH_URL and network"}
    except requests.exceptions.ConnectionError:
        return {"status": "❌ connection_refused", "hint": "Nothing listening at COUCH_URL"}


def check_admin(base: str) -> str:
    if not settings.HAS_ADMIN_CREDENTIAL:
        return "⚠️  not configured (user admin + user counts disabled)"
    try:
        resp = requests.get(f"{base}/_users", auth=(settings.COUCH_ADMIN_USER, settings.COUCH_ADMIN_PASS), timeout=5)
    except requests.exceptions.RequestException as e:
        return f"❓ cannot check ({e})"
    if resp.status_code == 200:
        return "✅ credential accepted"
    if resp.status_code == 401:
        return "❌ auth_failed — wrong COUCH_ADMIN_USER/COUCH_ADMIN_PASS"
    return f"❌ http_{resp.status_code}"


def check_login(base: str, user: str, password: str) -> str:
    """Same exchange the API performs at /login."""
    try:
        resp = requests.post(f"{base}/_session", data={"name": user, "password": password}, timeout=5)
    except requests.exceptions.RequestException as e:
        return f"❓ cannot check ({e})"
    if resp.status_code != 200:
        return f"❌ rejected (HTTP {resp.status_code})"
    if "AuthSession" not in resp.cookies:
        return "❌ no AuthSession cookie in response"
    roles = resp.json().get("roles") or []
    session_db = requests.get(f"{base}/{settings.PRIMARY_DB}", cookies={"AuthSession": resp.cookies["AuthSession"]}, timeout=5)
    access = "✅ can read" if session_db.status_code == 200 else f"❌ HTTP {session_db.status_code}"
    return f"✅ roles={roles} | {settings.PRIMARY_DB}: {access}"


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--user", help="Try a login with this CouchDB user")
    parser.add_argument("--password", default="")
    args = parser.parse_args()

    base = settings.COUCH_URL.rstrip("/")
    print("🗄️  CouchDB Connectivity Check")
    print("=" * 55)
    print(f"URL      : {base}")
    print(f"Database : {settings.PRIMARY_DB}")

    result = check_up(base)
    print(f"Status   : {result['status']}")
    if not result["status"].startswith("✅"):
        if "hint" in result:
            print(f"Hint     : {result['hint']}")
        sys.exit(1)

    print(f"Admin    : {check_admin(base)}")
    if args.user:
        print(f"Login    : {check_login(base, args.user, args.password)}")

    print("\n" + "=" * 55)
    print("✅ CouchDB reachable. Start the API with: uvicorn attendance_api.main:app --port 3000")


if __name__ == "__main__":
    main()
