from enum import Enum


class DataSource(str, Enum):
    ALPHA_VANTAGE = "Alpha Vantage"
    YAHOO_FINANCE = "Yahoo Finance"
    FINNHUB = "Finnhub"
    COMPANIES_MARKET_CAP = "CompaniesMarketCap"
    MISTRAL = "Mistral AI"
    GEMINI = "Gemini AI"
    WIKIPEDIA = "Wikipedia"
    CLEARBIT = "Clearbit"
    ESTIMATE = "Estimate"
    NO_DATA = "Error - No Data Retrieved"


class Sector(str, Enum):
    TECH = "tech"
    CONSUMER = "consumer"
    OTHER = "other"


class MetricCategory(str, Enum):
    FINANCIAL = "financial"
    CUSTOMER = "customer"
    PRODUCT = "product"


class TieBreak(str, Enum):
    MARKET_CAP = "marketCap"
    ALPHABETICAL = "alphabetical"
