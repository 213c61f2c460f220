"""Tests for HTTP providers -- all mocked with httpx.MockTransport, no API keys needed."""

import json
from unittest.mock import MagicMock, patch

import httpx
import pandas as pd
import pytest

from competitor_analysis.config.settings import Settings
from competitor_analysis.errors import MalformedPayload
from competitor_analysis.providers.ai_provider import (
    GeminiProvider,
    MistralProvider,
    parse_ai_json,
    profile_to_partial,
)
from competitor_analysis.providers.alpha_vantage_provider import AlphaVantageProvider
from competitor_analysis.providers.clearbit_provider import ClearbitLogoProvider, candidate_domains
from competitor_analysis.providers.finnhub_provider import FinnhubProvider
from competitor_analysis.providers.marketcap_provider import (
    CompaniesMarketCapProvider,
    find_company_slug,
    parse_info_boxes,
)
from competitor_analysis.providers.wikipedia_provider import WikipediaProvider, parse_infobox
from competitor_analysis.providers.yahoo_provider import YahooFinanceProvider


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def settings():
    return Settings(
        alpha_vantage_api_key="av-test",
        finnhub_api_key="fh-test",
        provider_timeout_seconds=2.0,
    )


# ---------------------------------------------------------------------------
# Alpha Vantage
# ---------------------------------------------------------------------------

OVERVIEW = {
    "Symbol": "AAPL",
    "Name": "Apple Inc",
    "Description": "Apple Inc. designs, manufactures, and markets smartphones.",
    "Industry": "ELECTRONIC COMPUTERS",
    "Sector": "TECHNOLOGY",
    "Address": "ONE INFINITE LOOP, CUPERTINO, CA, US",
    "MarketCapitalization": "2850000000000",
    "PERatio": "29.5",
    "ForwardPE": "27.1",
    "PEGRatio": "None",
    "EPS": "6.42",
    "ProfitMargin": "0.253",
    "RevenueTTM": "383285000000",
    "Beta": "1.29",
}


class TestAlphaVantageProvider:

    @pytest.mark.asyncio
    async def test_symbol_search_prefers_united_states(self, settings):
        def handler(request):
            assert request.url.params["function"] == "SYMBOL_SEARCH"
            return httpx.Response(200, json={"bestMatches": [
                {"1. symbol": "APC.DEX", "4. region": "XETRA"},
                {"1. symbol": "AAPL", "4. region": "United States"},
            ]})

        provider = AlphaVantageProvider(settings=settings, client=_client(handler))
        assert await provider.resolve_symbol("Apple") == "AAPL"

    @pytest.mark.asyncio
    async def test_overview_maps_fields(self, settings):
        def handler(request):
            assert request.url.params["function"] == "OVERVIEW"
            assert request.url.params["symbol"] == "AAPL"
            assert request.url.params["apikey"] == "av-test"
            return httpx.Response(200, json=OVERVIEW)

        provider = AlphaVantageProvider(settings=settings, client=_client(handler))
        partial = await provider.resolve("Apple", "AAPL")

        assert partial.official_name == "Apple Inc"
        assert partial.industry == "Electronic Computers"
        assert partial.sector == "Technology"
        assert partial.financials.stock_symbol == "AAPL"
        assert partial.financials.market_cap == 2_850_000_000_000
        assert partial.financials.pe_ratio == 29.5
        assert partial.financials.peg_ratio is None
        assert partial.financials.revenue == 383_285_000_000

    @pytest.mark.asyncio
    async def test_rate_limit_note_returns_none(self, settings):
        def handler(request):
            return httpx.Response(200, json={"Note": "Thank you for using Alpha Vantage!"})

        provider = AlphaVantageProvider(settings=settings, client=_client(handler))
        assert await provider.resolve("Apple", "AAPL") is None

    @pytest.mark.asyncio
    async def test_http_error_returns_none(self, settings):
        provider = AlphaVantageProvider(
            settings=settings, client=_client(lambda request: httpx.Response(503))
        )
        assert await provider.resolve("Apple", "AAPL") is None

    @pytest.mark.asyncio
    async def test_disabled_without_key(self):
        def handler(request):
            raise AssertionError("no request expected")

        provider = AlphaVantageProvider(settings=Settings(alpha_vantage_api_key=""), client=_client(handler))
        assert not provider.enabled
        assert await provider.resolve("Apple", "AAPL") is None
        assert await provider.resolve_symbol("Apple") is None

    @pytest.mark.asyncio
    async def test_requires_symbol(self, settings):
        def handler(request):
            raise AssertionError("no request expected")

        provider = AlphaVantageProvider(settings=settings, client=_client(handler))
        assert await provider.resolve("Apple") is None


# ---------------------------------------------------------------------------
# Finnhub
# ---------------------------------------------------------------------------

class TestFinnhubProvider:

    @pytest.mark.asyncio
    async def test_search_prefers_common_stock_without_suffix(self, settings):
        def handler(request):
            return httpx.Response(200, json={"count": 2, "result": [
                {"symbol": "AAPL.MX", "type": "Common Stock"},
                {"symbol": "AAPL", "type": "Common Stock"},
            ]})

        provider = FinnhubProvider(settings=settings, client=_client(handler))
        assert await provider.resolve_symbol("Apple") == "AAPL"

    @pytest.mark.asyncio
    async def test_profile_and_metrics_with_declared_units(self, settings):
        def handler(request):
            if request.url.path.endswith("/stock/profile2"):
                return httpx.Response(200, json={
                    "name": "Apple Inc",
                    "ticker": "AAPL",
                    "finnhubIndustry": "Technology",
                    "weburl": "https://www.apple.com/",
                    "logo": "https://static.finnhub.io/logo/aapl.png",
                    "marketCapitalization": 2850000.5,
                })
            if request.url.path.endswith("/stock/metric"):
                assert request.url.params["metric"] == "all"
                return httpx.Response(200, json={"metric": {
                    "peTTM": 29.1,
                    "netProfitMarginTTM": 25.3,
                    "epsTTM": 6.4,
                }})
            return httpx.Response(404)

        provider = FinnhubProvider(settings=settings, client=_client(handler))
        partial = await provider.resolve("Apple", "AAPL")

        assert partial.website == "https://www.apple.com/"
        assert partial.financials.market_cap == 2850000.5
        assert partial.financials.profit_margin == 25.3
        assert partial.scales["market_cap"] == 1_000_000.0
        assert partial.scales["profit_margin"] == 0.01

    @pytest.mark.asyncio
    async def test_empty_profile_returns_none(self, settings):
        provider = FinnhubProvider(
            settings=settings, client=_client(lambda request: httpx.Response(200, json={}))
        )
        assert await provider.resolve("Unknown", "ZZZZ") is None


# ---------------------------------------------------------------------------
# CompaniesMarketCap
# ---------------------------------------------------------------------------

SEARCH_HTML = """
<table><tr><td class="name-td">
  <a href="/apple/marketcap/"><div class="company-name">Apple</div></a>
</td></tr></table>
"""

MARKETCAP_HTML = """
<div class="company-name">Apple Inc.</div>
<div class="info-box"><div class="line1">$2.850 T</div><div class="line2">Marketcap</div></div>
<div class="info-box"><div class="line1">#1</div><div class="line2">Rank</div></div>
"""

REVENUE_HTML = """
<div class="info-box"><div class="line1">$383.28 B</div><div class="line2">Revenue (TTM)</div></div>
"""


class TestCompaniesMarketCapProvider:

    def test_find_company_slug(self):
        assert find_company_slug(SEARCH_HTML) == "apple"
        assert find_company_slug("<p>No results</p>") is None

    def test_parse_info_boxes(self):
        boxes = parse_info_boxes(MARKETCAP_HTML)
        assert boxes["marketcap"] == "$2.850 T"
        assert boxes["rank"] == "#1"
        assert boxes["name"] == "Apple Inc."
        assert parse_info_boxes(REVENUE_HTML)["revenue"] == "$383.28 B"

    @pytest.mark.asyncio
    async def test_fetch_scrapes_market_cap_and_revenue(self):
        pages = {
            "/search.do": SEARCH_HTML,
            "/apple/marketcap/": MARKETCAP_HTML,
            "/apple/revenue/": REVENUE_HTML,
        }

        def handler(request):
            html = pages.get(request.url.path)
            return httpx.Response(200, text=html) if html else httpx.Response(404)

        provider = CompaniesMarketCapProvider(settings=Settings(), client=_client(handler))
        partial = await provider.resolve("Apple")

        assert partial.financials.market_cap == pytest.approx(2.85e12)
        assert partial.financials.revenue == pytest.approx(383.28e9)
        assert partial.official_name == "Apple Inc."

    @pytest.mark.asyncio
    async def test_missing_revenue_page_keeps_market_cap(self):
        pages = {"/search.do": SEARCH_HTML, "/apple/marketcap/": MARKETCAP_HTML}

        def handler(request):
            html = pages.get(request.url.path)
            return httpx.Response(200, text=html) if html else httpx.Response(404)

        provider = CompaniesMarketCapProvider(settings=Settings(), client=_client(handler))
        partial = await provider.resolve("Apple")

        assert partial.financials.market_cap == pytest.approx(2.85e12)
        assert partial.financials.revenue is None


# ---------------------------------------------------------------------------
# Wikipedia
# ---------------------------------------------------------------------------

INFOBOX_HTML = """
<table class="infobox vcard">
  <tr><td colspan="2" class="infobox-image"><img src="//upload.wikimedia.org/apple-logo.svg"></td></tr>
  <tr><th class="infobox-label">Industry</th><td class="infobox-data">Consumer electronics[1]</td></tr>
  <tr><th class="infobox-label">Founded</th><td class="infobox-data">April 1, 1976; 48 years ago</td></tr>
  <tr><th class="infobox-label">Headquarters</th><td class="infobox-data">Cupertino, California, U.S.</td></tr>
  <tr><th class="infobox-label">Revenue</th><td class="infobox-data">US$383.3 billion (2023)</td></tr>
  <tr><th class="infobox-label">Website</th><td class="infobox-data"><a href="https://www.apple.com">apple.com</a></td></tr>
</table>
"""


class TestWikipediaProvider:

    def test_parse_infobox(self):
        facts = parse_infobox(INFOBOX_HTML)
        assert facts["industry"] == "Consumer electronics"
        assert facts["founded"] == "1976"
        assert facts["headquarters"] == "Cupertino, California, U.S."
        assert facts["website"] == "https://www.apple.com"
        assert facts["logo"] == "https://upload.wikimedia.org/apple-logo.svg"

    def test_parse_infobox_without_table(self):
        assert parse_infobox("<p>Stub article</p>") == {}

    @pytest.mark.asyncio
    async def test_fetch_combines_summary_and_infobox(self):
        def handler(request):
            if request.url.path == "/api/rest_v1/page/summary/Apple":
                return httpx.Response(200, json={"type": "disambiguation", "title": "Apple"})
            if request.url.path.startswith("/api/rest_v1/page/summary/Apple_"):
                return httpx.Response(200, json={
                    "type": "standard",
                    "title": "Apple Inc.",
                    "extract": "Apple Inc. is an American multinational technology company.",
                })
            if request.url.path == "/w/api.php":
                assert request.url.params["page"] == "Apple Inc."
                return httpx.Response(200, json={"parse": {"text": INFOBOX_HTML}})
            return httpx.Response(404)

        provider = WikipediaProvider(settings=Settings(), client=_client(handler))
        partial = await provider.resolve("Apple Inc.")

        assert partial.official_name == "Apple Inc."
        assert partial.description.startswith("Apple Inc. is an American")
        assert partial.founded == "1976"
        assert partial.financials.revenue == pytest.approx(383.3e9)

    @pytest.mark.asyncio
    async def test_summary_thumbnail_used_without_infobox_image(self):
        def handler(request):
            if request.url.path.startswith("/api/rest_v1/page/summary/"):
                return httpx.Response(200, json={
                    "type": "standard",
                    "title": "Acme Corporation",
                    "extract": "Acme Corporation makes anvils.",
                    "thumbnail": {"source": "https://upload.wikimedia.org/acme.png"},
                })
            if request.url.path == "/w/api.php":
                return httpx.Response(200, json={"parse": {"text": "<p>No infobox</p>"}})
            return httpx.Response(404)

        provider = WikipediaProvider(settings=Settings(), client=_client(handler))
        partial = await provider.resolve("Acme")

        assert partial.logo == "https://upload.wikimedia.org/acme.png"

    @pytest.mark.asyncio
    async def test_missing_article_returns_none(self):
        provider = WikipediaProvider(
            settings=Settings(), client=_client(lambda request: httpx.Response(404))
        )
        assert await provider.resolve("Nonexistent Widgets LLC") is None


# ---------------------------------------------------------------------------
# Clearbit
# ---------------------------------------------------------------------------

class TestClearbitLogoProvider:

    def test_candidate_domains_website_first(self):
        assert candidate_domains("Apple Inc.", "https://www.apple.com/about") == [
            "apple.com",
            "apple.net",
            "apple.org",
        ]

    def test_candidate_domains_from_name(self):
        assert candidate_domains("Coca-Cola Company")[0] == "cocacola.com"

    @pytest.mark.asyncio
    async def test_first_image_response_wins(self):
        def handler(request):
            if request.url.path == "/acme.net":
                return httpx.Response(200, headers={"content-type": "image/png"})
            if request.url.path == "/acme.com":
                return httpx.Response(200, headers={"content-type": "text/html"})
            return httpx.Response(404)

        provider = ClearbitLogoProvider(settings=Settings(), client=_client(handler))
        partial = await provider.resolve("Acme")

        assert partial.logo == "https://logo.clearbit.com/acme.net"

    @pytest.mark.asyncio
    async def test_no_logo_returns_none(self):
        provider = ClearbitLogoProvider(
            settings=Settings(), client=_client(lambda request: httpx.Response(404))
        )
        assert await provider.resolve("Acme") is None


# ---------------------------------------------------------------------------
# AI estimators
# ---------------------------------------------------------------------------
PROFILE = {
    "officialName": "Apple Inc.",
    "description": "Consumer electronics maker.",
    "founded": 1976,
    "financials": {"marketCap": 2850, "revenue": 383.3, "profitMargin": 0.25},
    "products": [{"name": "iPhone", "rating": 4.7}],
    "customerMetrics": {"userCount": 1500, "userGrowth": 0.05},
}


class TestParseAIJson:

    def test_plain_object(self):
        assert parse_ai_json('{"description": "ok"}') == {"description": "ok"}

    def test_strips_code_fence_and_prose(self):
        content = 'Here you go:\n```json\n{"industry": "Software"}\n```'
        assert parse_ai_json(content) == {"industry": "Software"}

    def test_removes_trailing_commas(self):
        assert parse_ai_json('{"strengths": ["brand", "scale",],}') == {"strengths": ["brand", "scale"]}

    def test_salvages_description(self):
        content = '{"description": "Makes \\"widgets\\".", "financials": {broken'
        assert parse_ai_json(content) == {"description": 'Makes "widgets".'}

    def test_unusable_raises(self):
        with pytest.raises(MalformedPayload):
            parse_ai_json("I don't know that company.", "Mistral AI")


class TestProfileToPartial:

    def test_camel_case_payload(self):
        partial = profile_to_partial(PROFILE)
        assert partial.official_name == "Apple Inc."
        assert partial.founded == "1976"
        assert partial.financials.market_cap == 2850
        assert partial.customer_metrics.user_count == 1500
        assert partial.products[0].name == "iPhone"

    def test_invalid_section_dropped(self):
        partial = profile_to_partial({
            "description": "Still useful.",
            "products": [{"rating": "excellent"}],
        })
        assert partial.description == "Still useful."
        assert partial.products == []

    def test_percent_and_money_strings_coerced(self):
        partial = profile_to_partial({
            "financials": {
                "stockSymbol": "ACME",
                "profitMargin": "15%",
                "revenue": "$200 billion",
                "peRatio": "N/A",
            },
            "customerMetrics": {"userGrowth": "5%"},
        })
        assert partial.financials.stock_symbol == "ACME"
        assert partial.financials.profit_margin == pytest.approx(0.15)
        assert partial.financials.revenue == pytest.approx(200e9)
        assert partial.financials.pe_ratio is None
        assert partial.customer_metrics.user_growth == pytest.approx(0.05)


class TestMistralProvider:

    @pytest.mark.asyncio
    async def test_chat_completion_parsed(self):
        def handler(request):
            body = json.loads(request.content)
            assert request.headers["authorization"] == "Bearer mi-test"
            assert body["response_format"] == {"type": "json_object"}
            assert "Apple" in body["messages"][0]["content"]
            return httpx.Response(200, json={
                "choices": [{"message": {"content": json.dumps(PROFILE)}}],
            })

        provider = MistralProvider(settings=Settings(mistral_api_key="mi-test"), client=_client(handler))
        partial = await provider.resolve("Apple")

        assert provider.is_estimator
        assert partial.description == "Consumer electronics maker."
        assert partial.financials.revenue == 383.3

    @pytest.mark.asyncio
    async def test_unexpected_shape_returns_none(self):
        provider = MistralProvider(
            settings=Settings(mistral_api_key="mi-test"),
            client=_client(lambda request: httpx.Response(200, json={"choices": []})),
        )
        assert await provider.resolve("Apple") is None

    @pytest.mark.asyncio
    async def test_disabled_without_key(self):
        provider = MistralProvider(settings=Settings(mistral_api_key=""), client=_client(lambda r: httpx.Response(500)))
        assert await provider.resolve("Apple") is None


class TestGeminiProvider:

    @pytest.mark.asyncio
    async def test_generate_content_parsed(self):
        def handler(request):
            assert request.url.path.endswith(":generateContent")
            assert request.url.params["key"] == "ge-test"
            text = "```json\n" + json.dumps({"industry": "Consumer Electronics"}) + "\n```"
            return httpx.Response(200, json={
                "candidates": [{"content": {"parts": [{"text": text}]}}],
            })

        provider = GeminiProvider(settings=Settings(gemini_api_key="ge-test"), client=_client(handler))
        partial = await provider.resolve("Apple")

        assert partial.industry == "Consumer Electronics"

    @pytest.mark.asyncio
    async def test_http_error_returns_none(self):
        provider = GeminiProvider(
            settings=Settings(gemini_api_key="ge-test"),
            client=_client(lambda request: httpx.Response(429, text="quota")),
        )
        assert await provider.resolve("Apple") is None


# ---------------------------------------------------------------------------
# Yahoo Finance
# ---------------------------------------------------------------------------

class TestYahooFinanceProvider:

    @staticmethod
    def _ticker(info, history):
        ticker = MagicMock()
        ticker.info = info
        ticker.history.return_value = history
        return ticker

    @pytest.mark.asyncio
    async def test_info_and_history(self):
        history = pd.DataFrame(
            {"Close": [190.123, 191.5, 189.0]},
            index=pd.to_datetime(["2024-05-01", "2024-05-02", "2024-05-03"]),
        )
        info = {
            "symbol": "AAPL",
            "longName": "Apple Inc.",
            "sector": "Technology",
            "city": "Cupertino",
            "state": "CA",
            "country": "United States",
            "marketCap": 2_900_000_000_000,
            "currentPrice": 189.0,
            "trailingPE": 29.4,
            "totalRevenue": 383_285_000_000,
        }
        with patch(
            "competitor_analysis.providers.yahoo_provider.yf.Ticker",
            return_value=self._ticker(info, history),
        ) as ticker_cls:
            provider = YahooFinanceProvider(settings=Settings())
            partial = await provider.resolve("Apple", "AAPL")

        ticker_cls.assert_called_once_with("AAPL")
        assert partial.official_name == "Apple Inc."
        assert partial.headquarters == "Cupertino, CA, United States"
        assert partial.financials.market_cap == 2_900_000_000_000
        assert partial.financials.pe_ratio == 29.4
        assert partial.financials.trailing_pe == 29.4
        assert [p.date for p in partial.financials.price_history] == [
            "2024-05-03",
            "2024-05-02",
            "2024-05-01",
        ]
        assert partial.financials.price_history[-1].price == 190.12

    @pytest.mark.asyncio
    async def test_empty_quote_returns_none(self):
        with patch(
            "competitor_analysis.providers.yahoo_provider.yf.Ticker",
            return_value=self._ticker({"symbol": "ZZZZ"}, pd.DataFrame()),
        ):
            provider = YahooFinanceProvider(settings=Settings())
            assert await provider.resolve("Nobody", "ZZZZ") is None

    @pytest.mark.asyncio
    async def test_yfinance_exception_returns_none(self):
        with patch(
            "competitor_analysis.providers.yahoo_provider.yf.Ticker",
            side_effect=RuntimeError("blocked"),
        ):
            provider = YahooFinanceProvider(settings=Settings())
            assert await provider.resolve("Apple", "AAPL") is None
