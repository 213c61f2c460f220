from .base import ProviderBase
from .alpha_vantage_provider import AlphaVantageProvider
from .yahoo_provider import YahooFinanceProvider
from .finnhub_provider import FinnhubProvider
from .marketcap_provider import CompaniesMarketCapProvider
from .ai_provider import AIProvider, GeminiProvider, MistralProvider
from .wikipedia_provider import WikipediaProvider
from .clearbit_provider import ClearbitLogoProvider

__all__ = [
    "ProviderBase",
    "AlphaVantageProvider",
    "YahooFinanceProvider",
    "FinnhubProvider",
    "CompaniesMarketCapProvider",
    "AIProvider",
    "MistralProvider",
    "GeminiProvider",
    "WikipediaProvider",
    "ClearbitLogoProvider",
]
