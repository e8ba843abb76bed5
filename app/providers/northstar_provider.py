import asyncio
import functools
import json
import logging
import time as time_module
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any, TypeVar

from selenium import webdriver
from selenium.common.exceptions import WebDriverException
from selenium.webdriver.common.by import By
from selenium.webdriver.support import expected_conditions
from selenium.webdriver.support.ui import WebDriverWait

from app.config import SiteCredentials, settings
from app.models.schemas import (
    OpenCourtEntry,
    ReservationRequest,
    ReservationState,
    ReservationStatus,
)
from app.providers.base import CourtBookingProvider, ReservationOutcome
from app.providers.browser import browser_session
from app.providers.credential_store import CredentialStore
from app.providers.exceptions import (
    AuthenticationError,
    PartnerAttachmentError,
    SaveControlNotFoundError,
)
from app.providers.northstar_dom import NorthstarDOMSchema, day_link_xpath
from app.providers.slot_grid import element_text, read_slot_grid
from app.providers.wait_helper import WaitStrategy

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Any failure re-runs the whole step, including urllib3 errors from a dropped
# chromedriver connection
RETRYABLE_EXCEPTIONS = (Exception,)

SUCCESS_MESSAGE = "Court reserved successfully"


def with_retry(
    max_attempts: int = 3,
    backoff_base: float = 0.0,
    exceptions: tuple[type[Exception], ...] = RETRYABLE_EXCEPTIONS,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator for retrying browser steps that may fail on a slow or flaky page.

    The whole decorated step is re-run from the start on each attempt. Only
    the listed exception types are retried; the last one is re-raised once
    attempts run out.

    Args:
        max_attempts: Maximum number of attempts (default 3)
        backoff_base: Base delay in seconds, doubled each attempt (default 0, no delay)
        exceptions: Tuple of exception types to retry on
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            last_exception: Exception | None = None
            for attempt in range(max_attempts):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    last_exception = e
                    if attempt < max_attempts - 1:
                        delay = backoff_base * (2**attempt)
                        logger.warning(
                            f"Attempt {attempt + 1}/{max_attempts} failed for {func.__name__}: {e}. "
                            f"Retrying..."
                        )
                        if delay > 0:
                            time_module.sleep(delay)
                    else:
                        logger.error(f"All {max_attempts} attempts failed for {func.__name__}: {e}")
            raise last_exception  # type: ignore[misc]

        return wrapper

    return decorator


class _ReservationProgress:
    """Tracks how far a reservation got, for logging and the final outcome."""

    def __init__(self) -> None:
        self.state = ReservationState.START

    def advance(self, new_state: ReservationState) -> None:
        logger.info(f"RESERVE_DEBUG: {self.state.value} -> {new_state.value}")
        self.state = new_state

    def outcome(self, status: ReservationStatus, message: str) -> ReservationOutcome:
        return ReservationOutcome(status=status, message=message, reached_state=self.state)


class NorthstarCourtProvider(CourtBookingProvider):
    """
    Selenium-based provider for the Northstar activity booking portlet.

    The club website is a Liferay portal. Booking a court takes these steps:
    1. Restore stored session cookies, or log in and store new ones
    2. Open the booking page and pick the day from the horizontal date picker
    3. Find the open cell for the requested court and start time and click it
    4. Add the partner through the player autocomplete in the booking dialog
    5. Save, then check the page for a restriction banner

    Implementation Note:
        Public async methods use asyncio.to_thread() to run the blocking
        Selenium work in a background thread. Each call creates its own
        browser session and quits it before returning.
    """

    def __init__(
        self,
        credentials: SiteCredentials,
        credential_store: CredentialStore | None = None,
        wait_strategy: WaitStrategy | None = None,
    ) -> None:
        self.credentials = credentials
        self.credential_store = credential_store or CredentialStore(settings.cookie_dir)
        self.wait_strategy = wait_strategy or WaitStrategy()

    async def __aenter__(self) -> "NorthstarCourtProvider":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.close()

    # ---------- Authenticator ----------

    def _authenticate(self, driver: webdriver.Chrome) -> None:
        """
        Give the browser an authenticated session.

        Stored cookies are loaded as-is, without navigating anywhere or checking
        that they still work. Without stored cookies the login form is submitted
        (with retries) and the resulting cookies are stored for next time.

        Raises:
            AuthenticationError: If every login attempt failed.
        """
        username = self.credentials.username
        cookies = self.credential_store.load(username)
        if cookies is not None:
            self._restore_cookies(driver, cookies)
            logger.info(f"Loaded cookies from {self.credential_store.path_for(username).name}")
            return

        logger.info("No stored cookies. Logging in.")
        try:
            self._login(driver)
        except RETRYABLE_EXCEPTIONS as e:
            raise AuthenticationError(f"Login failed: {e}") from e

        logger.info("Logged in successfully.")
        self.credential_store.save(username, driver.get_cookies())

    @with_retry(max_attempts=settings.retry_attempts, backoff_base=settings.retry_backoff_seconds)
    def _login(self, driver: webdriver.Chrome) -> None:
        logger.info("Navigating to login page...")
        driver.get(self.credentials.login_page_url)

        wait = WebDriverWait(driver, settings.wait_timeout_seconds)
        username_input = wait.until(
            expected_conditions.presence_of_element_located(
                (By.CSS_SELECTOR, NorthstarDOMSchema.LOGIN_USERNAME_INPUT)
            )
        )
        password_input = driver.find_element(
            By.CSS_SELECTOR, NorthstarDOMSchema.LOGIN_PASSWORD_INPUT
        )

        logger.info("Entering credentials...")
        username_input.clear()
        username_input.send_keys(self.credentials.username)
        password_input.clear()
        password_input.send_keys(self.credentials.password)

        current_url = driver.current_url
        driver.find_element(By.CSS_SELECTOR, NorthstarDOMSchema.LOGIN_SUBMIT_BUTTON).click()
        wait.until(expected_conditions.url_changes(current_url))

    def _restore_cookies(self, driver: webdriver.Chrome, cookies: list[dict[str, Any]]) -> None:
        # CDP accepts cookies for any domain, so no page has to be loaded first
        cdp_cookies = []
        for cookie in cookies:
            cdp_cookie = {
                "name": cookie["name"],
                "value": cookie["value"],
                "path": cookie.get("path", "/"),
            }
            if cookie.get("domain"):
                cdp_cookie["domain"] = cookie["domain"]
            if "expiry" in cookie:
                cdp_cookie["expires"] = cookie["expiry"]
            for key in ("secure", "httpOnly", "sameSite"):
                if key in cookie:
                    cdp_cookie[key] = cookie[key]
            cdp_cookies.append(cdp_cookie)

        driver.execute_cdp_cmd("Network.setCookies", {"cookies": cdp_cookies})

    # ---------- Day/Slot Locator ----------

    def _select_day(self, driver: webdriver.Chrome, day: str) -> bool:
        """
        Open the booking page and switch the slot grid to ``day``.

        Returns:
            True once the grid for the day is present, False if the date picker
            has no entry for the day.
        """
        driver.get(self.credentials.booking_page_url)

        wait = WebDriverWait(driver, settings.wait_timeout_seconds)
        wait.until(
            expected_conditions.presence_of_element_located(
                (By.CSS_SELECTOR, NorthstarDOMSchema.DATE_PICKER_CONTAINER)
            )
        )

        slots_locator = (By.CSS_SELECTOR, NorthstarDOMSchema.SLOTS_BODY)
        # The default day's grid is already rendered; the day switch re-renders it
        previous_grid = driver.find_elements(*slots_locator)

        if not self._click_day(driver, day):
            return False

        grid_switched = (
            expected_conditions.staleness_of(previous_grid[0]) if previous_grid else slots_locator
        )
        self.wait_strategy.settle(
            driver,
            fixed_duration=settings.day_settle_seconds,
            wait_condition=grid_switched,
            timeout=settings.wait_timeout_seconds,
        )
        logger.info(f"Navigated to {day}")

        wait.until(expected_conditions.presence_of_element_located(slots_locator))
        return True

    def _click_day(self, driver: webdriver.Chrome, day: str) -> bool:
        day_link = self.wait_strategy.wait_for_element(
            driver,
            (By.XPATH, day_link_xpath(day)),
            timeout=settings.element_timeout_seconds,
        )
        if day_link is None:
            logger.info(f"Could not find a link for {day}")
            return False

        # The link is not reliably pointer-clickable, so run its handler directly
        driver.execute_script("arguments[0].onclick();", day_link)
        logger.info(f"Clicked on {day}")
        return True

    @with_retry(max_attempts=settings.retry_attempts, backoff_base=settings.retry_backoff_seconds)
    def _open_day(self, driver: webdriver.Chrome, day: str) -> bool:
        return self._select_day(driver, day)

    @with_retry(max_attempts=settings.retry_attempts, backoff_base=settings.retry_backoff_seconds)
    def _collect_open_courts(
        self, driver: webdriver.Chrome, day: str
    ) -> list[OpenCourtEntry] | None:
        if not self._select_day(driver, day):
            return None
        return read_slot_grid(driver).open_courts()

    # ---------- Open courts ----------

    async def get_open_courts(self, day: str) -> list[OpenCourtEntry]:
        """
        List open (court, time) slots for ``day``.

        A day missing from the date picker gives an empty list. Browser
        failures that outlast the retries propagate to the caller.
        """
        return await asyncio.to_thread(self._get_open_courts_sync, day)

    def _get_open_courts_sync(self, day: str) -> list[OpenCourtEntry]:
        with browser_session() as driver:
            try:
                self._authenticate(driver)
                open_courts = self._collect_open_courts(driver, day)
            except Exception:
                self._capture_diagnostic_info(driver, "open_courts")
                raise

        if open_courts is None:
            logger.info(f'Date "{day}" not found.')
            return []
        logger.info(f"Found {len(open_courts)} open courts on {day}")
        return open_courts

    # ---------- Reservation Workflow ----------

    async def reserve_court(self, request: ReservationRequest) -> ReservationOutcome:
        """
        Book one court slot with a partner attached.

        Never raises for booking failures; the returned outcome says how the
        attempt ended and which workflow state it reached.
        """
        return await asyncio.to_thread(self._reserve_court_sync, request)

    def _reserve_court_sync(self, request: ReservationRequest) -> ReservationOutcome:
        logger.info(
            f"RESERVE_DEBUG: === STARTING RESERVATION === day={request.day}, "
            f"court={request.court_number}, time={request.start_time}, "
            f"partner={request.partner_membership_number}"
        )
        progress = _ReservationProgress()
        try:
            with browser_session() as driver:
                try:
                    outcome = self._run_reservation(driver, request, progress)
                except Exception:
                    self._capture_diagnostic_info(driver, f"reserve_{progress.state.value}")
                    raise
        except Exception as e:
            logger.error(f"RESERVE_DEBUG: Reservation failed at {progress.state.value}: {e}")
            outcome = progress.outcome(ReservationStatus.ERROR, str(e))

        logger.info(
            f"RESERVE_DEBUG: === RESERVATION COMPLETE === status={outcome.status.value}, "
            f"state={outcome.reached_state.value}"
        )
        return outcome

    def _run_reservation(
        self,
        driver: webdriver.Chrome,
        request: ReservationRequest,
        progress: _ReservationProgress,
    ) -> ReservationOutcome:
        self._authenticate(driver)
        progress.advance(ReservationState.AUTHENTICATED)

        if not self._open_day(driver, request.day):
            return progress.outcome(
                ReservationStatus.DATE_NOT_FOUND, f'Date "{request.day}" not found.'
            )
        progress.advance(ReservationState.DAY_SELECTED)

        cell = read_slot_grid(driver).locate(request.court_number, request.start_time)
        if cell is None:
            return progress.outcome(
                ReservationStatus.SLOT_UNAVAILABLE,
                f"Time slot at {request.start_time} on court {request.court_number} "
                f"not found or not available.",
            )
        cell.element.click()
        progress.advance(ReservationState.SLOT_FOUND)

        logger.info("Waiting for booking dialog")
        self.wait_strategy.settle(
            driver,
            fixed_duration=settings.dialog_settle_seconds,
            wait_condition=(By.XPATH, NorthstarDOMSchema.ADD_PLAYER_LINK_XPATH),
        )
        progress.advance(ReservationState.DIALOG_OPEN)

        self._attach_partner(driver, request.partner_name, request.partner_membership_number)
        progress.advance(ReservationState.PARTNER_ATTACHED)

        if self._confirm_booking(driver) == ReservationStatus.RESTRICTED:
            return progress.outcome(ReservationStatus.RESTRICTED, "Booking restricted")
        progress.advance(ReservationState.CONFIRMED)

        return progress.outcome(ReservationStatus.SUCCESS, SUCCESS_MESSAGE)

    # ---------- Partner Attachment ----------

    def _attach_partner(
        self, driver: webdriver.Chrome, partner_name: str, membership_number: str
    ) -> None:
        """
        Add the partner to the open booking dialog.

        Not retried: typing into the autocomplete a second time without
        clearing it would not bring back a missing suggestion.

        Raises:
            PartnerAttachmentError: If the input or the matching suggestion never appears.
        """
        logger.info("Add partner to booking")

        add_player_link = self.wait_strategy.wait_for_element(
            driver,
            (By.XPATH, NorthstarDOMSchema.ADD_PLAYER_LINK_XPATH),
            timeout=settings.element_timeout_seconds,
        )
        if add_player_link is None:
            logger.warning("Add player control not found; no player row was added")
        else:
            driver.execute_script("arguments[0].scrollIntoView();", add_player_link)
            self.wait_strategy.settle(driver, fixed_duration=settings.add_player_settle_seconds)
            add_player_link.click()
            logger.info("Clicked the add player control")

        partner_input = self.wait_strategy.wait_for_element(
            driver,
            (By.CSS_SELECTOR, NorthstarDOMSchema.PARTNER_INPUT),
            timeout=settings.wait_timeout_seconds,
        )
        if partner_input is None:
            raise PartnerAttachmentError("Partner name input did not appear.")
        partner_input.send_keys(partner_name)
        logger.debug("Typed partner name")

        suggestions = self.wait_strategy.wait_for_element(
            driver,
            (By.CSS_SELECTOR, NorthstarDOMSchema.AUTOCOMPLETE_READY_ITEM),
            timeout=settings.element_timeout_seconds,
        )
        if suggestions is None:
            raise PartnerAttachmentError(f"No autocomplete suggestions for '{partner_name}'.")

        item = self._find_partner_item(driver, membership_number)
        if item is None:
            raise PartnerAttachmentError("Partner not found in autocomplete list.")

        driver.execute_script("arguments[0].click();", item)
        logger.info(f"Selected partner: {partner_name} ({membership_number})")

    def _find_partner_item(self, driver: webdriver.Chrome, membership_number: str) -> Any | None:
        """Return the autocomplete entry whose data carries ``membership_number``."""
        for item in driver.find_elements(By.CSS_SELECTOR, NorthstarDOMSchema.AUTOCOMPLETE_ITEMS):
            raw_value = item.get_attribute(NorthstarDOMSchema.AUTOCOMPLETE_VALUE_ATTRIBUTE)
            if not raw_value:
                continue
            try:
                item_value = json.loads(raw_value)
            except json.JSONDecodeError:
                logger.debug(f"Skipping autocomplete item with unreadable data: {raw_value!r}")
                continue
            if not isinstance(item_value, dict):
                continue

            member_number = item_value.get(NorthstarDOMSchema.AUTOCOMPLETE_MEMBER_KEY)
            if member_number is not None and str(member_number) == membership_number:
                return item
        return None

    # ---------- Confirmation ----------

    def _confirm_booking(self, driver: webdriver.Chrome) -> ReservationStatus:
        """
        Save the booking and report whether the club rejected it.

        Returns:
            ReservationStatus.SUCCESS, or ReservationStatus.RESTRICTED when the
            page shows a restriction heading after saving.

        Raises:
            SaveControlNotFoundError: If the dialog has no Save button.
        """
        save_button = self.wait_strategy.wait_for_element(
            driver,
            (By.XPATH, NorthstarDOMSchema.SAVE_BUTTON_XPATH),
            timeout=settings.element_timeout_seconds,
        )
        if save_button is None:
            raise SaveControlNotFoundError("Save button not found.")

        save_button.click()
        logger.info("Booking saved.")

        self.wait_strategy.settle(driver, fixed_duration=settings.save_settle_seconds)

        if self._restriction_present(driver):
            logger.warning("Booking restricted by the club")
            return ReservationStatus.RESTRICTED

        logger.info("Booking confirmed successfully.")
        return ReservationStatus.SUCCESS

    def _restriction_present(self, driver: webdriver.Chrome) -> bool:
        for heading in driver.find_elements(By.TAG_NAME, NorthstarDOMSchema.HEADING):
            if NorthstarDOMSchema.RESTRICTION_MARKER in element_text(heading):
                return True
        return False

    # ---------- Diagnostics ----------

    def _capture_diagnostic_info(self, driver: webdriver.Chrome, context: str) -> None:
        """
        Save a screenshot and the page source when diagnostics are enabled.

        Args:
            driver: The WebDriver instance
            context: Description of what operation failed
        """
        if not settings.capture_diagnostics:
            return

        try:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            directory = Path(settings.diagnostics_dir)
            screenshot_path = directory / f"courtbook_debug_{context}_{timestamp}.png"
            html_path = directory / f"courtbook_debug_{context}_{timestamp}.html"

            driver.save_screenshot(str(screenshot_path))
            logger.info(f"Saved debug screenshot to {screenshot_path}")

            html_path.write_text(driver.page_source, encoding="utf-8")
            logger.info(f"Saved debug HTML to {html_path}")

        except (OSError, WebDriverException) as e:
            logger.warning(f"Failed to capture diagnostic info: {e}")

    async def close(self) -> None:
        """
        Close any resources.

        Each operation manages its own browser session, so there is nothing to
        clean up here. Kept for interface compatibility.
        """
        pass


class MockCourtProvider(CourtBookingProvider):
    """Mock provider for development without touching the real booking site."""

    COURT_COUNT = 4
    SLOT_TIMES = ("8:00 AM", "9:00 AM", "10:00 AM", "5:00 PM", "6:00 PM")

    def __init__(self) -> None:
        pass

    def _open_slots(self) -> list[OpenCourtEntry]:
        return [
            OpenCourtEntry(court=court, time=slot_time)
            for row, slot_time in enumerate(self.SLOT_TIMES)
            for court in range(1, self.COURT_COUNT + 1)
            if (row + court) % 2 == 1
        ]

    async def get_open_courts(self, day: str) -> list[OpenCourtEntry]:
        return self._open_slots()

    async def reserve_court(self, request: ReservationRequest) -> ReservationOutcome:
        await asyncio.sleep(0.1)

        requested = OpenCourtEntry(court=request.court_number, time=request.start_time)
        if requested not in self._open_slots():
            return ReservationOutcome(
                status=ReservationStatus.SLOT_UNAVAILABLE,
                message=(
                    f"Time slot at {request.start_time} on court {request.court_number} "
                    f"not found or not available."
                ),
                reached_state=ReservationState.DAY_SELECTED,
            )

        return ReservationOutcome(
            status=ReservationStatus.SUCCESS,
            message=SUCCESS_MESSAGE,
            reached_state=ReservationState.CONFIRMED,
        )

    async def close(self) -> None:
        pass
