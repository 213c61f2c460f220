"""Prompt for AI estimators: a structured company profile as JSON."""

from __future__ import annotations

COMPANY_PROFILE_PROMPT = """\
Provide detailed information about {company_name}. Use your own knowledge; \
real-time accuracy is not required.

Respond with a single JSON object and nothing else, using this structure:
{{
  "officialName": "registered company name",
  "description": "2-3 sentence description",
  "industry": "primary industry",
  "founded": "YYYY",
  "headquarters": "City, Country",
  "website": "https://...",
  "financials": {{
    "marketCap": number in billions USD (e.g. 200 for $200 billion),
    "revenue": number in billions USD (annual),
    "profitMargin": decimal (e.g. 0.15 for 15%),
    "peRatio": number,
    "eps": number
  }},
  "strengths": ["3-5 short points"],
  "weaknesses": ["2-3 short points"],
  "competitors": ["up to 5 company names"],
  "products": [
    {{"name": "...", "description": "...", "category": "...", "rating": number out of 5}}
  ],
  "customerMetrics": {{
    "userCount": number in millions,
    "userGrowth": decimal (e.g. 0.05 for 5% growth),
    "rating": number out of 5
  }}
}}

Use null for anything you do not know."""


def format_profile_prompt(company_name: str) -> str:
    return COMPANY_PROFILE_PROMPT.format(company_name=company_name)
