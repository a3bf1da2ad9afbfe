"""Tests for extraction strategies and record builders."""

import pytest

from prices_scraper.core.models import CryptoPrice, CurrencyRate, GoldPrice
from prices_scraper.strategies.base import ExtractionOptions
from prices_scraper.strategies.builders import build_crypto, build_currency, build_gold
from prices_scraper.strategies.cards import (
    CardStrategy,
    CryptoCardStrategy,
    CurrencyCardStrategy,
    GoldCardStrategy,
)
from prices_scraper.strategies.currency_codes import CurrencyCodeStrategy, parse_code_block
from prices_scraper.strategies.regex import (
    CryptoRegexStrategy,
    CurrencyRegexStrategy,
    GoldRegexStrategy,
    RegexStrategy,
)
from prices_scraper.strategies.script_json import (
    CryptoScriptJsonStrategy,
    CurrencyScriptJsonStrategy,
    GoldScriptJsonStrategy,
    ScriptJsonStrategy,
    find_record_list,
    iter_script_json,
)
from prices_scraper.strategies.table import (
    CryptoTableStrategy,
    CurrencyTableStrategy,
    GoldTableStrategy,
    TableStrategy,
)


CURRENCY_TABLE_HTML = """
<html><body>
<table>
  <thead><tr><th>العملة</th><th>شراء</th><th>مبيع</th></tr></thead>
  <tbody>
    <tr><td>دولار أمريكي</td><td>12,500</td><td>12,600</td></tr>
    <tr><td>ليرة تركية</td><td>--</td><td>420</td></tr>
    <tr><td>يورو (EUR)</td><td>١٣٬٠٠٠</td><td>13,100 ل.س</td></tr>
  </tbody>
</table>
</body></html>
"""

CURRENCY_CARDS_HTML = """
<div class="rates">
  <div class="currency-item" data-currency="usd">
    <span class="name">دولار أمريكي</span>
    <span class="buy">12,500</span>
    <span class="sell">12,600</span>
  </div>
  <div class="currency-item">
    <h3>يورو</h3>
    <span class="buy" data-value="13000"></span>
    <span class="sell">13,100</span>
  </div>
  <div class="currency-item">
    <span class="name">جنيه مصري</span>
    <span class="buy">غير متوفر</span>
    <span class="sell">260</span>
  </div>
</div>
"""

SCRIPT_JSON_HTML = """
<html><body>
<p>لا توجد بيانات</p>
<script>var data = {"rates": [{"name":"يورو","buy":"13000","sell":"13100"}]};</script>
</body></html>
"""

GOLD_TEXT_HTML = """
<div class="content">
  <span>عيار 21</span> ... <b>1,850,000</b> ... <b>1,870,000</b>
</div>
"""


@pytest.fixture
def options():
    return ExtractionOptions()


class TestBuilders:
    """Tests for record builders."""

    def test_currency_requires_positive_prices(self):
        assert build_currency("دولار", "12,500", "0") is None
        assert build_currency("دولار", "", "12,600") is None
        assert build_currency("", "12,500", "12,600") is None

    def test_currency_no_ordering_enforced(self):
        """Test sell may be below buy."""
        rate = build_currency("دولار", "12,600", "12,500")
        assert rate == CurrencyRate(name="دولار", buy=12600, sell=12500)

    def test_currency_code_detected_from_name(self):
        rate = build_currency("يورو (EUR)", "13000", "13100")
        assert rate.code == "EUR"

    def test_gold_band(self, options):
        assert build_gold("أونصة", "50", options) is None
        assert build_gold("سبيكة", "20,000,000", options) is None
        assert build_gold("ذهب عيار 18", "1,500,000", options).price == 1_500_000

    def test_gold_carat_from_name(self, options):
        gold = build_gold("ذهب عيار 18", "1,500,000", options)
        assert gold.carat == 18
        assert gold.buy is None
        assert gold.sell is None

    def test_gold_second_quote(self, options):
        gold = build_gold("ذهب عيار 21", "1,850,000", options, sell="1,870,000")
        assert gold.price == 1_850_000
        assert gold.buy == 1_850_000
        assert gold.sell == 1_870_000

    def test_gold_implausible_second_quote_dropped(self, options):
        gold = build_gold("ذهب عيار 21", "1,850,000", options, sell="21")
        assert gold.sell is None
        assert gold.buy is None

    def test_crypto_syp_from_source(self, options):
        crypto = build_crypto("Bitcoin", "btc", "$65,000", options, price_syp="812,000,000")
        assert crypto == CryptoPrice(
            name="Bitcoin", symbol="BTC", price=65000, price_syp=812_000_000
        )

    def test_crypto_syp_derived(self, options):
        crypto = build_crypto("Bitcoin", "BTC", "65000", options)
        assert crypto.price_syp == 65000 * 12500

    def test_crypto_syp_disabled(self):
        crypto = build_crypto("Bitcoin", "BTC", "65000", ExtractionOptions(syp_per_usd=None))
        assert crypto.price_syp is None

    def test_crypto_invalid_price(self, options):
        assert build_crypto("Bitcoin", "BTC", "N/A", options) is None


class TestTableStrategies:
    """Tests for tabular strategies."""

    def test_currency_table(self):
        """Test rows are read and malformed rows are discarded."""
        records = CurrencyTableStrategy().extract(CURRENCY_TABLE_HTML)

        assert records == [
            CurrencyRate(name="دولار أمريكي", buy=12500, sell=12600),
            CurrencyRate(name="يورو (EUR)", buy=13000, sell=13100, code="EUR"),
        ]

    def test_currency_table_too_few_cells(self):
        html = "<table><tr><td>دولار</td><td>12,500</td></tr></table>"
        assert CurrencyTableStrategy().extract(html) == []

    def test_gold_table(self):
        html = """
        <table>
          <tr><td>ذهب عيار 21</td><td>1,850,000</td></tr>
          <tr><td>ذهب عيار 18</td><td>1,580,000</td><td>1,600,000</td></tr>
          <tr><td>أونصة (USD)</td><td>50</td></tr>
        </table>
        """
        records = GoldTableStrategy().extract(html)

        assert len(records) == 2
        assert records[0] == GoldPrice(name="ذهب عيار 21", price=1_850_000, carat=21)
        assert records[1].sell == 1_600_000

    def test_crypto_table(self):
        html = """
        <table>
          <tr><td>Bitcoin</td><td>BTC</td><td>$65,000</td><td>812,000,000</td></tr>
          <tr><td>Ethereum</td><td>ETH</td><td>$3,200</td></tr>
        </table>
        """
        records = CryptoTableStrategy().extract(html)

        assert [r.symbol for r in records] == ["BTC", "ETH"]
        assert records[0].price_syp == 812_000_000
        assert records[1].price_syp == 3200 * 12500

    def test_no_table(self):
        assert CurrencyTableStrategy().extract("<p>لا شيء</p>") == []


class TestCardStrategies:
    """Tests for card/container strategies."""

    def test_currency_cards(self):
        records = CurrencyCardStrategy().extract(CURRENCY_CARDS_HTML)

        assert records == [
            CurrencyRate(name="دولار أمريكي", buy=12500, sell=12600, code="USD"),
            CurrencyRate(name="يورو", buy=13000, sell=13100),
        ]

    def test_currency_card_attributes(self):
        html = '<div data-currency="eur" data-buy="13000" data-sell="13100"><span class="name">يورو</span></div>'
        records = CurrencyCardStrategy().extract(html)
        assert records == [CurrencyRate(name="يورو", buy=13000, sell=13100, code="EUR")]

    def test_gold_cards(self):
        html = """
        <div class="gold-item"><span class="name">ذهب عيار 24</span><span class="price">2,100,000</span></div>
        <div class="gold-item"><span class="name">غرام</span><span class="price">12</span></div>
        """
        records = GoldCardStrategy().extract(html)
        assert records == [GoldPrice(name="ذهب عيار 24", price=2_100_000, carat=24)]

    def test_crypto_cards(self):
        html = """
        <div class="crypto-row">
          <span class="name">Bitcoin</span><span class="symbol">BTC</span>
          <span class="price">$65,000</span><span class="syp-price">800,000,000</span>
        </div>
        """
        records = CryptoCardStrategy().extract(html)
        assert records == [
            CryptoPrice(name="Bitcoin", symbol="BTC", price=65000, price_syp=800_000_000)
        ]


class TestScriptJson:
    """Tests for embedded-script JSON strategies."""

    def test_iter_assignment(self):
        body = 'window.__STATE__ = {"gold": [{"name": "x", "price": 1}]};'
        values = list(iter_script_json(body))
        assert values == [{"gold": [{"name": "x", "price": 1}]}]

    def test_iter_plain_json(self):
        assert list(iter_script_json('  [{"a": 1}] ')) == [[{"a": 1}]]

    def test_iter_invalid(self):
        assert list(iter_script_json("var x = {not json};")) == []

    def test_find_record_list_nested(self):
        obj = {"page": {"data": {"prices": [{"name": "a"}]}}}
        assert find_record_list(obj) == [{"name": "a"}]

    def test_find_record_list_code_mapping(self):
        obj = {"currencies": {"USD": {"buy": 1, "sell": 2}}}
        assert find_record_list(obj) == [{"buy": 1, "sell": 2, "code": "USD", "name": "USD"}]

    def test_currency_script(self):
        records = CurrencyScriptJsonStrategy().extract(SCRIPT_JSON_HTML)
        assert records == [CurrencyRate(name="يورو", buy=13000, sell=13100)]

    def test_currency_code_mapping(self):
        html = """<script>
        const rates = {"currencies": {"USD": {"name": "دولار", "buy": 12500, "sell": 12600}}};
        </script>"""
        records = CurrencyScriptJsonStrategy().extract(html)
        assert records == [CurrencyRate(name="دولار", buy=12500, sell=12600, code="USD")]

    def test_gold_script(self):
        html = """<script>
        var payload = {"data": {"gold": [
            {"title": "ذهب عيار 21", "value": "1,850,000"},
            {"title": "خطأ", "value": "5"}
        ]}};
        </script>"""
        records = GoldScriptJsonStrategy().extract(html)
        assert records == [GoldPrice(name="ذهب عيار 21", price=1_850_000, carat=21)]

    def test_crypto_script(self):
        html = """<script type="application/json">
        {"prices": [{"name": "Ethereum", "symbol": "eth", "price_usd": 3200, "price_syp": null}]}
        </script>"""
        records = CryptoScriptJsonStrategy().extract(html)
        assert records == [
            CryptoPrice(name="Ethereum", symbol="ETH", price=3200, price_syp=3200 * 12500)
        ]

    def test_external_scripts_ignored(self):
        html = '<script src="/app.js">var data = {"rates": [{"name": "a", "buy": 1, "sell": 1}]};</script>'
        assert CurrencyScriptJsonStrategy().extract(html) == []


class TestCurrencyCodeStrategy:
    """Tests for the code-aware currency strategy."""

    def test_parse_parenthesised(self):
        rate = parse_code_block("يورو (EUR) 13,000 13,100")
        assert rate == CurrencyRate(name="يورو", buy=13000, sell=13100, code="EUR")

    def test_parse_bare_code_first(self):
        rate = parse_code_block("USD دولار أمريكي 12,500 12,600")
        assert rate == CurrencyRate(name="دولار أمريكي", buy=12500, sell=12600, code="USD")

    def test_parse_needs_two_numbers(self):
        assert parse_code_block("يورو (EUR) 13,000") is None

    def test_parse_unknown_code(self):
        assert parse_code_block("شيء (XYZ) 1 2") is None

    def test_extract_enriched(self):
        html = """
        <ul>
          <li>يورو (EUR) 13,000 13,100</li>
          <li>EUR يورو 13,500 13,600</li>
          <li>USD دولار ١٢٬٥٠٠ ١٢٬٦٠٠</li>
        </ul>
        """
        records = CurrencyCodeStrategy().extract(html)

        assert [r.code for r in records] == ["EUR", "USD"]
        data = records[1].to_dict()
        assert data["average"] == 12550
        assert data["spread"] == 100
        assert data["spread_percent"] == pytest.approx(0.8)

    def test_extract_ignores_navigation(self):
        html = "<nav><li>USD 1 2</li></nav><p>نص</p>"
        assert CurrencyCodeStrategy().extract(html) == []


class TestRegexStrategies:
    """Tests for regex-over-raw-markup strategies."""

    def test_gold_carat_window(self):
        """Test carat mention followed by buy and sell numbers."""
        records = GoldRegexStrategy().extract(GOLD_TEXT_HTML)

        assert records == [
            GoldPrice(
                name="ذهب عيار 21",
                price=1_850_000,
                carat=21,
                buy=1_850_000,
                sell=1_870_000,
            )
        ]

    def test_gold_several_carats(self):
        text = "<p>عيار 24: 2,100,000</p><p>عيار 21: 1,850,000</p><p>عيار 18: 1,580,000</p>"
        records = GoldRegexStrategy().extract(text)

        assert [r.carat for r in records] == [24, 21, 18]
        assert [r.price for r in records] == [2_100_000, 1_850_000, 1_580_000]
        assert all(r.sell is None for r in records)

    def test_gold_trailing_carat_form(self):
        records = GoldRegexStrategy().extract("<div>18 عيار - 1,580,000</div>")
        assert records[0].carat == 18
        assert records[0].price == 1_580_000

    def test_gold_out_of_band_numbers_skipped(self):
        assert GoldRegexStrategy().extract("<p>عيار 21 سعر 50</p>") == []

    @pytest.mark.parametrize(
        "text",
        [
            "<p>عيار 21 تحديث 2024 1,850,000</p>",
            "<p>عيار 21 بتاريخ 15/03/2024 الساعة 14:30 السعر 1,850,000</p>",
            "<p>عيار 21 (2024-03-15) 1,850,000</p>",
        ],
    )
    def test_gold_dates_and_years_skipped(self, text):
        records = GoldRegexStrategy().extract(text)

        assert [(r.carat, r.price, r.sell) for r in records] == [(21, 1_850_000, None)]

    def test_currency_with_code(self):
        html = "<p>دولار أمريكي (USD) 12,500 12,600</p><p>يورو (EUR): 13,000 | 13,100</p>"
        records = CurrencyRegexStrategy().extract(html)

        assert records == [
            CurrencyRate(name="دولار أمريكي", buy=12500, sell=12600, code="USD"),
            CurrencyRate(name="يورو", buy=13000, sell=13100, code="EUR"),
        ]

    def test_currency_without_code(self):
        html = "<div>العملة شراء مبيع</div><div>دولار أمريكي 12,500 12,600</div>"
        records = CurrencyRegexStrategy().extract(html)
        assert records == [CurrencyRate(name="دولار أمريكي", buy=12500, sell=12600)]

    def test_crypto(self):
        html = "<li>Bitcoin (BTC) $65,000</li><li>Ethereum (ETH) $3,200</li>"
        records = CryptoRegexStrategy().extract(html)

        assert [r.symbol for r in records] == ["BTC", "ETH"]
        assert records[0].price == 65000
        assert records[0].price_syp == 65000 * 12500

    def test_nothing_found(self):
        assert CurrencyRegexStrategy().extract("<p>no prices here</p>") == []


@pytest.mark.parametrize(
    "base", [TableStrategy, CardStrategy, ScriptJsonStrategy, RegexStrategy]
)
def test_structural_bases_are_abstract(base):
    with pytest.raises(TypeError):
        base()
