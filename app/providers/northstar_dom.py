"""
DOM selectors for the Northstar activity booking portlet.

The club site is a Liferay portal running Northstar's PrimeFaces-based
activity booking portlet. Element IDs contain colons, so ID lookups use
attribute selectors instead of escaped #id selectors. That form works the
same in Selenium and in BeautifulSoup.

XPath entries are templates and are only used through Selenium.
"""

from dataclasses import dataclass

PORTLET_FORM_PREFIX = "_activities_WAR_northstarportlet_:activityForm"


@dataclass(frozen=True)
class NorthstarDOMSchema:
    # ========== LOGIN PAGE ==========
    LOGIN_USERNAME_INPUT = "input[id='_com_liferay_login_web_portlet_LoginPortlet_login']"
    LOGIN_PASSWORD_INPUT = "input[id='_com_liferay_login_web_portlet_LoginPortlet_password']"
    LOGIN_SUBMIT_BUTTON = ".btn-sign-in"

    # ========== DATE PICKER ==========
    DATE_PICKER_CONTAINER = ".horizontal-date-picker-container"
    CALENDAR_DAY_LABEL = "span.calendar-day"
    # Link wrapping the weekday label; formatted with the weekday name
    DAY_LINK_XPATH = "//a[.//span[contains(@class, 'calendar-day') and contains(text(), '{day}')]]"

    # ========== SLOT GRID ==========
    SLOTS_BODY = f"[id='{PORTLET_FORM_PREFIX}:slots_data']"
    SLOTS_ROWS = f"[id='{PORTLET_FORM_PREFIX}:slots_data'] > tr"
    SLOTS_HEADER_CELLS = f"[id='{PORTLET_FORM_PREFIX}:slots_head'] > tr > th"
    OPEN_CELL_CLASS = "open"
    START_TIME_ATTRIBUTE = "data-start-time"

    # ========== BOOKING DIALOG ==========
    ADD_PLAYER_LINK_XPATH = "//a[.//i[contains(@class, 'fa-plus')]]"
    PARTNER_INPUT = f"input[id='{PORTLET_FORM_PREFIX}:playersTable:1:player_input']"
    AUTOCOMPLETE_READY_ITEM = "ul.ui-autocomplete-items > li.ui-autocomplete-item"
    AUTOCOMPLETE_ITEMS = "ul.ui-autocomplete-items li"
    AUTOCOMPLETE_VALUE_ATTRIBUTE = "data-item-value"
    AUTOCOMPLETE_MEMBER_KEY = "memberNumber"
    SAVE_BUTTON_XPATH = "//button[.//span[normalize-space(text())='Save']]"

    # ========== CONFIRMATION PAGE ==========
    HEADING = "h1"
    RESTRICTION_MARKER = "Restriction"


# CSS selectors checked against captured HTML by scripts/validate_selectors.py
CSS_SELECTORS = {
    "login": {
        "username_input": NorthstarDOMSchema.LOGIN_USERNAME_INPUT,
        "password_input": NorthstarDOMSchema.LOGIN_PASSWORD_INPUT,
        "submit_button": NorthstarDOMSchema.LOGIN_SUBMIT_BUTTON,
    },
    "booking": {
        "date_picker": NorthstarDOMSchema.DATE_PICKER_CONTAINER,
        "calendar_day": NorthstarDOMSchema.CALENDAR_DAY_LABEL,
        "slots_body": NorthstarDOMSchema.SLOTS_BODY,
        "slots_rows": NorthstarDOMSchema.SLOTS_ROWS,
        "slots_header": NorthstarDOMSchema.SLOTS_HEADER_CELLS,
    },
}


def day_link_xpath(day: str) -> str:
    return NorthstarDOMSchema.DAY_LINK_XPATH.format(day=day)
