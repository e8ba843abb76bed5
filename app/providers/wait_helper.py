"""
Wait strategy helper for Selenium operations.

Element waits are always bounded WebDriverWait calls. Settle delays, the
pauses after actions whose completion the page does not signal, depend on the
wait mode configured via the WAIT_MODE environment variable:

- FIXED: sleep the full settle duration (default; matches the site's timing)
- EVENT_DRIVEN: wait for an observable condition if one is given, else skip
- HYBRID: wait for the condition, then add a small buffer sleep
"""

import logging
import time as time_module
from collections.abc import Callable
from typing import Any

from selenium.common.exceptions import TimeoutException
from selenium.webdriver.chrome.webdriver import WebDriver
from selenium.webdriver.support import expected_conditions
from selenium.webdriver.support.ui import WebDriverWait

from app.config import WaitMode, settings

logger = logging.getLogger(__name__)

HYBRID_BUFFER_SECONDS = 0.3


class WaitStrategy:
    """
    Provides bounded element waits and mode-dependent settle delays.

    Usage:
        wait_strategy = WaitStrategy()
        link = wait_strategy.wait_for_element(driver, (By.XPATH, "//a"), timeout=5.0)
        wait_strategy.settle(driver, fixed_duration=3.0, wait_condition=(By.CSS_SELECTOR, "table"))
    """

    def __init__(self, mode: WaitMode | None = None) -> None:
        self.mode = mode or settings.wait_mode
        logger.info(f"WaitStrategy initialized with mode: {self.mode.value}")

    def wait_for_element(
        self,
        driver: WebDriver,
        locator: tuple[str, str],
        timeout: float = 5.0,
        condition: str = "presence",
    ) -> Any | None:
        """
        Wait up to ``timeout`` seconds for an element.

        Args:
            driver: The WebDriver instance
            locator: Tuple of (By.*, selector) for the element
            timeout: Maximum wait time in seconds
            condition: The expected condition type:
                - "presence": Wait for element to be present in DOM
                - "visible": Wait for element to be visible
                - "clickable": Wait for element to be clickable

        Returns:
            The element if it appeared in time, otherwise None
        """
        wait = WebDriverWait(driver, timeout)

        try:
            if condition == "visible":
                element = wait.until(expected_conditions.visibility_of_element_located(locator))
            elif condition == "clickable":
                element = wait.until(expected_conditions.element_to_be_clickable(locator))
            else:
                element = wait.until(expected_conditions.presence_of_element_located(locator))
        except TimeoutException:
            logger.debug(f"Timed out after {timeout}s waiting for element {locator}")
            return None

        logger.debug(f"Element {locator} found")
        return element

    def settle(
        self,
        driver: WebDriver,
        fixed_duration: float,
        wait_condition: tuple[str, str] | Callable[[WebDriver], Any] | None = None,
        timeout: float = 10.0,
    ) -> None:
        """
        Pause after an action so the page can finish reacting to it.

        Args:
            driver: The WebDriver instance
            fixed_duration: Duration to sleep in FIXED mode
            wait_condition: Optional locator, or expected condition, to wait for in
                EVENT_DRIVEN/HYBRID modes. A locator waits for element presence.
            timeout: Maximum wait time for the condition
        """
        if self.mode == WaitMode.FIXED:
            logger.debug(f"FIXED mode: settling {fixed_duration}s")
            time_module.sleep(fixed_duration)
            return

        if wait_condition:
            if callable(wait_condition):
                condition = wait_condition
            else:
                condition = expected_conditions.presence_of_element_located(wait_condition)
            try:
                WebDriverWait(driver, timeout).until(condition)
                logger.debug(f"{self.mode.value} mode: settle condition {wait_condition} met")
            except TimeoutException:
                logger.warning(
                    f"{self.mode.value} mode: timeout waiting for settle condition {wait_condition}"
                )
        else:
            logger.debug(f"{self.mode.value} mode: no settle condition, minimal wait")

        if self.mode == WaitMode.HYBRID:
            logger.debug(f"HYBRID mode: adding {HYBRID_BUFFER_SECONDS}s buffer")
            time_module.sleep(HYBRID_BUFFER_SECONDS)
