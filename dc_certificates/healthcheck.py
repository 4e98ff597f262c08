#!/usr/bin/env python3
# dc_certificates/healthcheck.py
# Health report for a running chain generator service

import argparse
import os
import sys

import requests

DEFAULT_URL = os.getenv("DC_HEALTHCHECK_URL", "http://localhost:8000/health/detailed")

def fetch_health(url: str) -> dict:
    resp = requests.get(url, timeout=5)
    resp.raise_for_status()
    return resp.json()

def render_health(data: dict) -> list:
    lines = [
        "",
        "📋 System Health Report",
        "-" * 30,
        f"Status      : {data['status'].upper()}",
        f"Timestamp   : {data['timestamp']}",
        f"Uptime      : {data['uptime']} seconds",
        "",
    ]

    policy = data.get("policy", {})
    if policy:
        lines.append("🔑 Key Policy")
        lines.append(f"   Key Size              : {policy.get('keySize', 'unknown')}")
        lines.append(f"   Public Exponent       : {policy.get('publicExponent', 'unknown')}")
        lines.append(f"   Root Validity (days)  : {policy.get('rootValidityDays', 'unknown')}")
        lines.append(f"   Build Deadline (s)    : {policy.get('buildTimeoutSeconds', 'unknown')}")

    return lines

def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="dc-healthcheck", description="Print the health of a running service")
    parser.add_argument("--url", default=DEFAULT_URL)
    args = parser.parse_args(argv)

    try:
        data = fetch_health(args.url)
    except (requests.RequestException, ValueError) as e:
        print(f"❌ Failed to fetch health: {e}", file=sys.stderr)
        return 1

    print("\n".join(render_health(data)))
    return 0

if __name__ == "__main__":
    sys.exit(main())
