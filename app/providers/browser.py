"""Disposable headless Chrome sessions, one per request."""

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager

from selenium import webdriver
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service
from webdriver_manager.chrome import ChromeDriverManager

from app.config import settings

logger = logging.getLogger(__name__)


def create_driver() -> webdriver.Chrome:
    """Create a Chrome WebDriver instance with its own fresh profile."""
    options = Options()
    if settings.headless:
        options.add_argument("--headless=new")
    options.add_argument("--no-sandbox")
    options.add_argument("--disable-setuid-sandbox")
    options.add_argument("--disable-dev-shm-usage")
    options.add_argument("--disable-gpu")
    options.add_argument("--window-size=1920,1080")
    options.add_argument("--disable-blink-features=AutomationControlled")
    options.add_experimental_option("excludeSwitches", ["enable-automation"])
    options.add_experimental_option("useAutomationExtension", False)

    # Prefer an explicit ChromeDriver path, then fall back to ChromeDriverManager
    chromedriver_path = settings.chromedriver_path or os.environ.get("CHROMEDRIVER_PATH")
    if chromedriver_path and os.path.exists(chromedriver_path):
        service = Service(chromedriver_path)
    else:
        service = Service(ChromeDriverManager().install())
    driver = webdriver.Chrome(service=service, options=options)
    driver.set_page_load_timeout(settings.page_load_timeout_seconds)

    driver.execute_cdp_cmd(
        "Page.addScriptToEvaluateOnNewDocument",
        {
            "source": """
            Object.defineProperty(navigator, 'webdriver', {
                get: () => undefined
            })
        """
        },
    )

    return driver


@contextmanager
def browser_session() -> Iterator[webdriver.Chrome]:
    """Yield a new browser session and always quit it afterwards."""
    driver = create_driver()
    logger.debug("Browser session started")
    try:
        yield driver
    finally:
        driver.quit()
        logger.debug("Browser session closed")
