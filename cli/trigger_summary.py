import os
import sys
import argparse
from datetime import datetime
from urllib.parse import urlencode

import requests
from dotenv import load_dotenv

# Load environment variables from a .env file for local testing
load_dotenv()

# The deployed summary endpoint, e.g. https://abc123.execute-api.us-east-1.amazonaws.com/summary
API_ENDPOINT = os.environ.get("LOG_SUMMARY_API")


def build_trigger_request(endpoint: str, run_date: str = None) -> str:
    """
    Builds the URL that triggers a summary run, optionally for a given day.

    Raises:
        ValueError: If the endpoint is empty or the date is not YYYY-MM-DD.
    """
    if not endpoint:
        raise ValueError("LOG_SUMMARY_API is not set. Please create a .env file.")
    if not run_date:
        return endpoint

    datetime.strptime(run_date, "%Y-%m-%d")  # raises ValueError on a bad date
    separator = "&" if "?" in endpoint else "?"
    return f"{endpoint}{separator}{urlencode({'date': run_date})}"


def trigger_summary(endpoint: str, run_date: str = None) -> bool:
    """
    Calls the summary endpoint and prints the outcome. Returns True on a 200.
    """
    try:
        url = build_trigger_request(endpoint, run_date)
    except ValueError as e:
        print(f"❌ ERROR: {e}")
        return False

    print(f"--- Triggering log summary: {url} ---")
    try:
        response = requests.post(url, timeout=30)
    except requests.exceptions.RequestException as e:
        print("\n❌ Failed to reach the summary endpoint.")
        print(f"Error: {e}")
        return False

    print(f"Status Code: {response.status_code}")
    print(f"Response Body: {response.text}")
    if response.status_code == 200:
        print("\n✅ Success! Summary files were written.")
        return True
    if response.status_code == 404:
        print("\nℹ️ No logs found for that day.")
    return False


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Trigger the daily log summary.")
    parser.add_argument("--date", help="Day to summarize (YYYY-MM-DD). Defaults to today (UTC).")
    parser.add_argument("--endpoint", default=API_ENDPOINT, help="Overrides LOG_SUMMARY_API.")
    args = parser.parse_args()

    sys.exit(0 if trigger_summary(args.endpoint, args.date) else 1)
