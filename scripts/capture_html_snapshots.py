#!/usr/bin/env python3
"""
Capture HTML snapshots from the live club booking site for testing.

This script:
1. Captures the login page
2. Authenticates (stored cookies or a fresh login)
3. Opens the booking page and selects a day from the date picker
4. Saves the pages as fixtures for scripts/validate_selectors.py

Usage:
    python scripts/capture_html_snapshots.py [DayName]
"""

import json
import sys
import time
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from selenium.common.exceptions import WebDriverException

from app.config import settings
from app.providers.browser import browser_session
from app.providers.exceptions import ConfigurationError, CourtBookingError
from app.providers.northstar_provider import NorthstarCourtProvider
from app.services.day_window import get_next_four_days

FIXTURES_DIR = Path(__file__).parent.parent / "tests" / "fixtures"

PAGE_LOAD_WAIT = 2


def save_snapshot(driver, name: str, metadata: dict | None = None) -> Path:
    """Save HTML snapshot and metadata."""
    FIXTURES_DIR.mkdir(parents=True, exist_ok=True)

    html_path = FIXTURES_DIR / f"{name}.html"
    html_path.write_text(driver.page_source, encoding="utf-8")
    print(f"  Saved: {html_path}")

    if metadata:
        meta_path = FIXTURES_DIR / f"{name}.meta.json"
        metadata["url"] = driver.current_url
        metadata["title"] = driver.title
        metadata["captured_at"] = time.strftime("%Y-%m-%d %H:%M:%S")
        meta_path.write_text(json.dumps(metadata, indent=2), encoding="utf-8")
        print(f"  Saved: {meta_path}")

    return html_path


def capture_snapshots(day: str) -> None:
    print("=" * 60)
    print("Club Booking Site HTML Snapshot Capture")
    print("=" * 60)

    try:
        credentials = settings.site_credentials()
    except ConfigurationError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    provider = NorthstarCourtProvider(credentials)

    with browser_session() as driver:
        print("\n[1/3] Capturing login page...")
        driver.get(credentials.login_page_url)
        time.sleep(PAGE_LOAD_WAIT)
        save_snapshot(driver, "northstar_login_page", {"state": "login_form"})

        print("\n[2/3] Authenticating...")
        try:
            provider._authenticate(driver)
        except CourtBookingError as e:
            print(f"ERROR: {e}")
            sys.exit(1)

        print(f"\n[3/3] Opening booking page for {day}...")
        try:
            found = provider._select_day(driver, day)
        except WebDriverException as e:
            print(f"  Warning: booking page did not finish loading: {e}")
            found = False
        if not found:
            print(f"  Warning: no date picker entry for {day}")

        save_snapshot(
            driver,
            "northstar_booking_page",
            {"state": "day_selected" if found else "booking_page", "day": day},
        )

    print("\n" + "=" * 60)
    print("Snapshot capture complete!")
    print(f"Fixtures saved to: {FIXTURES_DIR}")
    print("=" * 60)


if __name__ == "__main__":
    target_day = sys.argv[1] if len(sys.argv) > 1 else get_next_four_days()[0]
    capture_snapshots(target_day)
