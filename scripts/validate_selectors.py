#!/usr/bin/env python3
"""
Validate the CSS selectors in NorthstarDOMSchema against captured HTML fixtures.

Run scripts/capture_html_snapshots.py first to refresh the fixtures from the
live site. XPath selectors are not covered here; BeautifulSoup only speaks CSS.

Usage:
    python scripts/validate_selectors.py
"""

import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from bs4 import BeautifulSoup

from app.providers.northstar_dom import CSS_SELECTORS

FIXTURES_DIR = Path(__file__).parent.parent / "tests" / "fixtures"

FIXTURE_FOR_CATEGORY = {
    "login": "northstar_login_page",
    "booking": "northstar_booking_page",
}


def load_html(fixture_name: str) -> BeautifulSoup | None:
    """Load an HTML fixture and return BeautifulSoup object."""
    html_path = FIXTURES_DIR / f"{fixture_name}.html"

    if not html_path.exists():
        return None

    return BeautifulSoup(html_path.read_text(encoding="utf-8"), "html.parser")


def check_selector(soup: BeautifulSoup, selector: str) -> tuple[int, list[str]]:
    """Run a CSS selector against HTML and return match count and sample text."""
    try:
        elements = soup.select(selector)
    except ValueError as e:
        return -1, [f"ERROR: {e}"]

    samples = []
    for el in elements[:3]:
        text = el.get_text(strip=True)[:50]
        classes = el.get("class", [])
        class_str = ".".join(classes) if classes else ""
        samples.append(f"<{el.name} class='{class_str}'>{text}...")
    return len(elements), samples


def validate_selectors() -> int:
    print("=" * 70)
    print("DOM Selector Validation Report")
    print("=" * 70)

    results: dict[str, list] = {"working": [], "broken": [], "errors": []}

    for category, selectors in CSS_SELECTORS.items():
        print(f"\nCategory: {category.upper()}")
        soup = load_html(FIXTURE_FOR_CATEGORY[category])
        if soup is None:
            print(f"  SKIPPED: fixture '{FIXTURE_FOR_CATEGORY[category]}' not found")
            continue

        for name, selector in selectors.items():
            count, samples = check_selector(soup, selector)

            if count > 0:
                status = "[OK] FOUND"
                results["working"].append((category, name, selector, count))
            elif count == 0:
                status = "[X] NOT FOUND"
                results["broken"].append((category, name, selector))
            else:
                status = "[!] ERROR"
                results["errors"].append((category, name, selector, samples[0]))

            print(f"\n  {name}:")
            print(f"    Selector: {selector}")
            print(f"    Status: {status} ({count} matches)")
            if count > 0:
                for sample in samples:
                    print(f"    Sample: {sample}")

    print("\n" + "=" * 70)
    print(f"[OK] Working selectors: {len(results['working'])}")
    print(f"[X]  Broken selectors:  {len(results['broken'])}")
    print(f"[!]  Error selectors:   {len(results['errors'])}")

    report_path = FIXTURES_DIR / "selector_report.json"
    report = {
        "working": [
            {"category": c, "name": n, "selector": s, "count": cnt}
            for c, n, s, cnt in results["working"]
        ],
        "broken": [{"category": c, "name": n, "selector": s} for c, n, s in results["broken"]],
        "errors": [
            {"category": c, "name": n, "selector": s, "error": e}
            for c, n, s, e in results["errors"]
        ],
    }
    report_path.write_text(json.dumps(report, indent=2), encoding="utf-8")
    print(f"\nReport saved to: {report_path}")

    return 1 if results["broken"] or results["errors"] else 0


if __name__ == "__main__":
    sys.exit(validate_selectors())
