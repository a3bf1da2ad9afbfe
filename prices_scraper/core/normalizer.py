"""
Normalization utilities for scraped price data.

Handles:
- Numbers with thousands separators, currency glyphs and Arabic-Indic digits
- Carat detection for gold ("عيار 21", "21 عيار", "21k")
- ISO currency code detection
- Text cleanup
"""

import math
import re
from typing import Optional

import structlog

logger = structlog.get_logger(__name__)


# Arabic-Indic (U+0660..) and Extended Arabic-Indic (U+06F0..) digits
_DIGIT_TABLE = str.maketrans(
    "٠١٢٣٤٥٦٧٨٩"
    "۰۱۲۳۴۵۶۷۸۹",
    "0123456789" * 2,
)
ARABIC_DECIMAL_SEPARATOR = "٫"
ARABIC_THOUSANDS_SEPARATOR = "٬"

_CURRENCY_GLYPHS = re.compile(
    r"US\$|\$|€|£|ل\.\s?س\.?|ليرة(?:\s+سورية)?|دولار|SYP|USD",
    re.IGNORECASE,
)
_SEPARATORS = re.compile(r"[,'\s\u00a0\u202f\u066c]")
_DECIMAL = re.compile(r"[+-]?(?:\d+(?:\.\d+)?|\.\d+)")

# Number-looking token inside free text (after digit conversion)
NUMBER_TOKEN = re.compile(r"\d{1,3}(?:,\d{3})+(?:\.\d+)?|\d+(?:\.\d+)?")

_TAG = re.compile(r"<[^>]+>")
_SCRIPT_OR_STYLE = re.compile(r"<(script|style)\b[^>]*>.*?</\1>", re.IGNORECASE | re.DOTALL)
_BLOCK_BREAK = re.compile(r"<br\s*/?>|</(?:tr|li|p|div|h[1-6]|table|ul|ol|section|article)\s*>", re.IGNORECASE)

# ISO codes recognised next to currency names (SYP is the quote currency)
CURRENCY_CODES = frozenset({
    "USD", "EUR", "GBP", "CHF", "CAD", "AUD", "JPY", "CNY", "RUB", "SEK",
    "NOK", "DKK", "TRY", "SAR", "AED", "KWD", "QAR", "BHD", "OMR", "JOD",
    "IQD", "LBP", "EGP", "LYD", "TND", "DZD", "MAD", "IRR", "INR", "MYR",
})

_PAREN_CODE = re.compile(r"\(\s*([A-Z]{3})\s*\)")
_BARE_CODE = re.compile(r"(?<![A-Za-z])([A-Z]{3})(?![A-Za-z])")

CARAT_PATTERNS = [
    re.compile(r"عيار\s*(\d{1,2})(?!\d)"),
    re.compile(r"(?<![\d.,])(\d{1,2})\s*عيار"),
    re.compile(r"(?<![\d.,])(\d{1,2})\s*[kK](?![A-Za-z])"),
]
VALID_CARATS = range(8, 25)


def to_western_digits(text: str) -> str:
    """Convert Arabic-Indic digits and separators to ASCII equivalents."""
    if not text:
        return ""
    return (
        text.translate(_DIGIT_TABLE)
        .replace(ARABIC_DECIMAL_SEPARATOR, ".")
        .replace(ARABIC_THOUSANDS_SEPARATOR, ",")
    )


def normalize_number(value) -> Optional[float]:
    """
    Parse a scraped price into a float.

    Removes thousands separators, currency glyphs and whitespace, then
    parses what is left as a decimal number.

    - "1,234.50" -> 1234.5
    - "12,500 ل.س" -> 12500.0
    - "$ 0.52" -> 0.52
    - "١٢٬٥٠٠" -> 12500.0

    Args:
        value: Raw text (numbers are passed through)

    Returns:
        Float value, or None when the input is empty or not numeric.
        Callers skip None candidates; it never means zero.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None

    text = to_western_digits(str(value))
    text = _CURRENCY_GLYPHS.sub("", text)
    text = _SEPARATORS.sub("", text)
    text = text.strip()

    if not text or not _DECIMAL.fullmatch(text):
        return None

    number = float(text)
    return number if math.isfinite(number) else None


def is_positive(value: Optional[float]) -> bool:
    return value is not None and value > 0


def in_range(value: Optional[float], low: float, high: float) -> bool:
    """Strict plausibility band check."""
    return value is not None and low < value < high


def normalize_name(text: Optional[str]) -> str:
    """
    Normalize a record name for consistent display.

    - Collapses whitespace (including non-breaking spaces)
    - Strips leading/trailing whitespace and punctuation noise

    Args:
        text: Raw name

    Returns:
        Normalized name ("" for None)
    """
    if not text:
        return ""

    normalized = re.sub(r"\s+", " ", text)
    return normalized.strip(" \t\n:-|")


def find_number_tokens(text: str) -> list[str]:
    """Return number-looking tokens in order of appearance."""
    if not text:
        return []
    return NUMBER_TOKEN.findall(to_western_digits(text))


def strip_tags(markup: str) -> str:
    """
    Flatten markup into text without parsing it.

    Script and style bodies are dropped, block ends become newlines and
    every other tag becomes a space.
    """
    if not markup:
        return ""
    text = _SCRIPT_OR_STYLE.sub(" ", markup)
    text = _BLOCK_BREAK.sub("\n", text)
    text = _TAG.sub(" ", text)
    text = text.replace("&nbsp;", " ").replace("&amp;", "&")
    return re.sub(r"[ \t\u00a0]+", " ", text)


def parse_carat(text: Optional[str]) -> Optional[int]:
    """
    Detect the gold carat mentioned in text.

    Supported forms: "عيار 21", "21 عيار", "21k", "18 K".

    Returns:
        Carat as int (8-24) or None
    """
    if not text:
        return None

    text = to_western_digits(text)
    for pattern in CARAT_PATTERNS:
        match = pattern.search(text)
        if match:
            carat = int(match.group(1))
            if carat in VALID_CARATS:
                return carat
    return None


def detect_currency_code(text: Optional[str]) -> Optional[str]:
    """
    Find an allow-listed ISO currency code in text.

    Parenthesised codes ("يورو (EUR)") win over bare words ("EUR يورو").
    """
    if not text:
        return None

    for pattern in (_PAREN_CODE, _BARE_CODE):
        for match in pattern.finditer(text):
            code = match.group(1)
            if code in CURRENCY_CODES:
                return code
    return None
