"""
Slot grid read from the booking page: one row per start time, one cell per court.

The first column of every row is the time label, so it is kept as
``SlotRow.time_label`` and left out of ``SlotRow.cells``. Court identifiers
are 1-based column positions, so ``cells[0]`` is court 1.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from selenium.webdriver.common.by import By

from app.models.schemas import OpenCourtEntry
from app.providers.northstar_dom import NorthstarDOMSchema

logger = logging.getLogger(__name__)


@dataclass
class SlotCell:
    is_open: bool
    start_time: str = ""
    element: Any = None


@dataclass
class SlotRow:
    time_label: str
    cells: list[SlotCell] = field(default_factory=list)


@dataclass
class SlotGrid:
    court_headers: list[str] = field(default_factory=list)
    rows: list[SlotRow] = field(default_factory=list)

    def open_courts(self) -> list[OpenCourtEntry]:
        """Every open cell in row-then-column order."""
        return [
            OpenCourtEntry(court=position, time=cell.start_time)
            for row in self.rows
            for position, cell in enumerate(row.cells, start=1)
            if cell.is_open
        ]

    def court_column(self, court_number: int) -> int | None:
        """Position of the first header naming ``Court {court_number}``."""
        label = f"Court {court_number}"
        for position, header in enumerate(self.court_headers, start=1):
            if label in header:
                return position
        return None

    def locate(self, court_number: int, start_time: str) -> SlotCell | None:
        """
        Find the open cell for a court and start time.

        Returns:
            The cell, or None if the time row or court column is missing or
            the cell is not open.
        """
        row = next((r for r in self.rows if r.time_label == start_time), None)
        if row is None:
            logger.info(f"Start time '{start_time}' not found")
            return None

        position = self.court_column(court_number)
        if position is None or position > len(row.cells):
            logger.info(f"Court number '{court_number}' not found")
            return None

        cell = row.cells[position - 1]
        if not cell.is_open:
            logger.info(f"Slot at {start_time} on court {court_number} is not open")
            return None
        return cell


def element_text(element: Any) -> str:
    return (element.get_attribute("textContent") or "").strip()


def _has_class(element: Any, class_name: str) -> bool:
    return class_name in (element.get_attribute("class") or "").split()


def _read_cell(element: Any) -> SlotCell:
    if not _has_class(element, NorthstarDOMSchema.OPEN_CELL_CLASS):
        return SlotCell(is_open=False, element=element)

    start_time = ""
    divs = element.find_elements(By.TAG_NAME, "div")
    if divs:
        start_time = divs[0].get_attribute(NorthstarDOMSchema.START_TIME_ATTRIBUTE) or ""
    return SlotCell(is_open=True, start_time=start_time, element=element)


def read_slot_grid(driver: Any) -> SlotGrid:
    """Read the slot table currently rendered on the booking page."""
    headers = driver.find_elements(By.CSS_SELECTOR, NorthstarDOMSchema.SLOTS_HEADER_CELLS)
    # Skip the time column header
    court_headers = [element_text(h) for h in headers[1:]]

    rows = []
    for row_element in driver.find_elements(By.CSS_SELECTOR, NorthstarDOMSchema.SLOTS_ROWS):
        cells = row_element.find_elements(By.XPATH, "./td")
        if not cells:
            continue
        rows.append(
            SlotRow(
                time_label=element_text(cells[0]),
                cells=[_read_cell(cell) for cell in cells[1:]],
            )
        )

    logger.debug(f"Read slot grid with {len(rows)} rows and {len(court_headers)} courts")
    return SlotGrid(court_headers=court_headers, rows=rows)
