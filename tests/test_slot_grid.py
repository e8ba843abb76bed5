"""Tests for reading and querying the booking page slot grid."""

from unittest.mock import MagicMock

import pytest
from selenium.webdriver.common.by import By

from app.models.schemas import OpenCourtEntry
from app.providers.northstar_dom import NorthstarDOMSchema
from app.providers.slot_grid import SlotCell, SlotGrid, SlotRow, read_slot_grid


def make_element(
    text: str = "",
    classes: str = "",
    attributes: dict | None = None,
    children: list | None = None,
) -> MagicMock:
    """Build a mock WebElement answering get_attribute and find_elements."""
    element = MagicMock()
    values = {"textContent": text, "class": classes, **(attributes or {})}
    element.get_attribute.side_effect = values.get
    element.find_elements.return_value = children or []
    return element


def open_cell(start_time: str) -> MagicMock:
    div = make_element(attributes={NorthstarDOMSchema.START_TIME_ATTRIBUTE: start_time})
    return make_element(text="Open", classes="slot open", children=[div])


def booked_cell(name: str = "J. Smith") -> MagicMock:
    return make_element(text=name, classes="slot booked", children=[make_element(text=name)])


def make_driver(headers: list[str], rows: list[list[MagicMock]]) -> MagicMock:
    header_elements = [make_element(text=h) for h in headers]
    row_elements = [make_element(children=cells) for cells in rows]
    by_selector = {
        NorthstarDOMSchema.SLOTS_HEADER_CELLS: header_elements,
        NorthstarDOMSchema.SLOTS_ROWS: row_elements,
    }
    driver = MagicMock()
    driver.find_elements.side_effect = lambda by, selector: by_selector.get(selector, [])
    return driver


@pytest.fixture
def grid() -> SlotGrid:
    return SlotGrid(
        court_headers=["Court 1", "Court 2", "Court 3"],
        rows=[
            SlotRow(
                "9:00 AM",
                [
                    SlotCell(True, "9:00 AM"),
                    SlotCell(False),
                    SlotCell(True, "9:00 AM"),
                ],
            ),
            SlotRow(
                "10:00 AM",
                [SlotCell(False), SlotCell(True, "10:00 AM"), SlotCell(False)],
            ),
        ],
    )


class TestOpenCourts:
    def test_single_open_cell(self) -> None:
        grid = SlotGrid(
            rows=[
                SlotRow("9:00 AM", [SlotCell(True, "9:00 AM")]),
                SlotRow("10:00 AM", []),
            ]
        )
        assert grid.open_courts() == [OpenCourtEntry(court=1, time="9:00 AM")]

    def test_row_then_column_order(self, grid: SlotGrid) -> None:
        assert grid.open_courts() == [
            OpenCourtEntry(court=1, time="9:00 AM"),
            OpenCourtEntry(court=3, time="9:00 AM"),
            OpenCourtEntry(court=2, time="10:00 AM"),
        ]

    def test_fully_booked_grid(self) -> None:
        grid = SlotGrid(rows=[SlotRow("9:00 AM", [SlotCell(False), SlotCell(False)])])
        assert grid.open_courts() == []

    def test_time_comes_from_cell_not_row_label(self) -> None:
        grid = SlotGrid(rows=[SlotRow("9:00 AM", [SlotCell(True, "9:15 AM")])])
        assert grid.open_courts() == [OpenCourtEntry(court=1, time="9:15 AM")]


class TestLocate:
    def test_finds_open_cell(self, grid: SlotGrid) -> None:
        cell = grid.locate(3, "9:00 AM")
        assert cell is grid.rows[0].cells[2]

    def test_booked_cell_is_not_returned(self, grid: SlotGrid) -> None:
        assert grid.locate(2, "9:00 AM") is None

    def test_unknown_time(self, grid: SlotGrid) -> None:
        assert grid.locate(1, "11:00 AM") is None

    def test_time_label_must_match_exactly(self, grid: SlotGrid) -> None:
        assert grid.locate(1, "09:00 AM") is None

    def test_unknown_court(self, grid: SlotGrid) -> None:
        assert grid.locate(4, "9:00 AM") is None

    def test_header_match_is_substring(self) -> None:
        grid = SlotGrid(
            court_headers=["Court 1 (Clay)", "Court 2 (Hard)"],
            rows=[SlotRow("9:00 AM", [SlotCell(False), SlotCell(True, "9:00 AM")])],
        )
        assert grid.locate(2, "9:00 AM") is grid.rows[0].cells[1]

    def test_header_beyond_row_cells(self) -> None:
        grid = SlotGrid(
            court_headers=["Court 1", "Court 2"],
            rows=[SlotRow("9:00 AM", [SlotCell(True, "9:00 AM")])],
        )
        assert grid.locate(2, "9:00 AM") is None


class TestReadSlotGrid:
    def test_reads_headers_rows_and_cells(self) -> None:
        driver = make_driver(
            headers=["Time", "Court 1", "Court 2"],
            rows=[
                [make_element(text=" 9:00 AM "), open_cell("9:00 AM"), booked_cell()],
                [make_element(text="10:00 AM"), booked_cell(), open_cell("10:00 AM")],
            ],
        )

        grid = read_slot_grid(driver)

        assert grid.court_headers == ["Court 1", "Court 2"]
        assert [row.time_label for row in grid.rows] == ["9:00 AM", "10:00 AM"]
        assert grid.open_courts() == [
            OpenCourtEntry(court=1, time="9:00 AM"),
            OpenCourtEntry(court=2, time="10:00 AM"),
        ]

    def test_cells_keep_their_elements(self) -> None:
        cell = open_cell("9:00 AM")
        driver = make_driver(
            headers=["Time", "Court 1"], rows=[[make_element(text="9:00 AM"), cell]]
        )

        located = read_slot_grid(driver).locate(1, "9:00 AM")

        assert located is not None
        assert located.element is cell

    def test_rows_without_cells_are_skipped(self) -> None:
        driver = make_driver(headers=["Time", "Court 1"], rows=[[]])
        assert read_slot_grid(driver).rows == []

    def test_open_cell_without_div_has_empty_time(self) -> None:
        driver = make_driver(
            headers=["Time", "Court 1"],
            rows=[[make_element(text="9:00 AM"), make_element(classes="slot open")]],
        )
        assert read_slot_grid(driver).open_courts() == [OpenCourtEntry(court=1, time="")]

    def test_rows_are_read_as_direct_cells(self) -> None:
        row = make_element(children=[make_element(text="9:00 AM")])
        driver = MagicMock()
        driver.find_elements.side_effect = lambda by, selector: (
            [row] if selector == NorthstarDOMSchema.SLOTS_ROWS else []
        )

        read_slot_grid(driver)

        row.find_elements.assert_called_once_with(By.XPATH, "./td")
