"""
BeautifulSoup helpers shared by the extraction strategies.

Every strategy parses its own soup, so helpers that mutate the tree
never leak into another strategy.
"""

from typing import Optional

from bs4 import BeautifulSoup, Tag

import structlog

logger = structlog.get_logger(__name__)


# Containers for rows when a page has several tables
TABLE_ROW_SELECTORS = [
    "table tbody tr",
    "table tr",
]

# Elements that never carry prices
NOISE_SELECTORS = "nav, footer, header, aside, script, style, noscript, .menu, .navigation"


def parse_markup(markup: str) -> BeautifulSoup:
    """Parse markup with lxml."""
    return BeautifulSoup(markup or "", "lxml")


def table_rows(soup: BeautifulSoup) -> list[list[str]]:
    """
    Collect the cell texts of every data row.

    Tries TABLE_ROW_SELECTORS in order and keeps the first that yields
    rows with <td> cells. Header-only rows are skipped.

    Args:
        soup: Parsed HTML

    Returns:
        List of rows, each an ordered list of cell texts
    """
    for selector in TABLE_ROW_SELECTORS:
        rows = []
        for tr in soup.select(selector):
            cells = tr.find_all("td")
            if not cells:
                continue
            rows.append([cell.get_text(" ", strip=True) for cell in cells])
        if rows:
            return rows
    return []


def select_containers(soup: BeautifulSoup, selectors: list[str]) -> list[Tag]:
    """
    Select repeating containers matching any of the hints.

    Matches are returned in document order. Containers nested inside
    another match are dropped so a card is not read twice.
    """
    if not selectors:
        return []

    matches = soup.select(", ".join(selectors))
    matched_ids = {id(m) for m in matches}

    containers = []
    for element in matches:
        if any(id(parent) in matched_ids for parent in element.parents):
            continue
        containers.append(element)
    return containers


def first_text(container: Tag, selectors: list[str]) -> Optional[str]:
    """
    Try multiple CSS selectors in order, return the first non-empty text.

    Falls back to a ``data-value`` attribute when the element is empty.

    Args:
        container: Element to search within
        selectors: CSS selectors in priority order

    Returns:
        Stripped text or None
    """
    for selector in selectors:
        element = container.select_one(selector)
        if element is None:
            continue
        text = element.get_text(" ", strip=True)
        if not text:
            text = (element.get("data-value") or "").strip()
        if text:
            return text
    return None


def script_bodies(soup: BeautifulSoup) -> list[str]:
    """Return the contents of inline <script> blocks."""
    bodies = []
    for script in soup.find_all("script"):
        if script.get("src"):
            continue
        body = script.string or script.get_text()
        if body and body.strip():
            bodies.append(body)
    return bodies


def cleanup_noise(soup: BeautifulSoup) -> None:
    """
    Remove navigation, footer, scripts from soup.

    Modifies soup in place.
    """
    for elem in soup.select(NOISE_SELECTORS):
        elem.decompose()


BLOCK_TAGS = ["tr", "li", "p", "div", "dd", "section", "article", "h2", "h3", "h4", "h5"]


def block_texts(soup: BeautifulSoup) -> list[str]:
    """
    Text of innermost block elements, one string per block.

    Removes noise elements first (modifies soup).
    """
    cleanup_noise(soup)
    texts = []
    for element in soup.find_all(BLOCK_TAGS):
        if element.find(BLOCK_TAGS) is not None:
            continue
        text = element.get_text(" ", strip=True)
        if text:
            texts.append(text)
    return texts
