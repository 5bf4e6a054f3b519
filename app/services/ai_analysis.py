"""
AI analysis for watchlist tickers.

Asks Gemini (JSON mode) for three risks, three strengths, a short
evaluation and best-effort estimates of the headline financials, given the
live quote data for the ticker.

Outcomes:
    - valid reply          -> AIAnalysis
    - unusable reply       -> AIAnalysis(malformed=True) with
                              "Analysis parsing failed" placeholders
    - no GEMINI_API_KEY    -> ConfigurationError
    - SDK / network errors -> propagate; the watchlist service turns them
                              into the "AI analysis unavailable" placeholder
"""

from typing import Any, Optional

import structlog

from app.core.config import ConfigurationError
from app.models import AIAnalysis, TickerData
from app.services.llm_utils import calculate_cost, call_gemini_async, get_gemini_model

logger = structlog.get_logger()

PARSING_FAILED = "Analysis parsing failed"
PARSING_FAILED_EVALUATION = "Could not generate AI analysis."
DESCRIPTION_LIMIT = 500
ITEMS_PER_LIST = 3

# Reply keys -> AIAnalysis fields
ESTIMATE_FIELDS = {
    "revenue": "revenue",
    "netIncome": "net_income",
    "eps": "eps",
    "peRatio": "pe_ratio",
    "pbRatio": "pb_ratio",
    "evEbitda": "ev_ebitda",
}


def format_money(value: float) -> str:
    """Compact dollar amount for the prompt: $1.25T, $3.40B, $12.5M."""
    if abs(value) >= 1e12:
        return f"${value / 1e12:.2f}T"
    if abs(value) >= 1e9:
        return f"${value / 1e9:.2f}B"
    if abs(value) >= 1e6:
        return f"${value / 1e6:.1f}M"
    if value == 0:
        return "N/A"
    return f"${value:,.0f}"


def build_prompt(ticker: str, data: TickerData) -> str:
    return f"""You are a senior financial analyst. Analyze the stock {ticker} ({data.company_name}) and provide your assessment.

Available real-time data:
- Sector: {data.sector} | Industry: {data.industry}
- Current Price: ${data.price:.2f}
- Market Cap: {format_money(data.market_cap)}
- YTD Performance: {data.ytd_change:.2f}%
- 1-Year Performance: {data.one_year_change:.2f}%

Company description: {data.description[:DESCRIPTION_LIMIT]}

Using the above data AND your knowledge of this company's financials, competitive position, and industry dynamics, provide:

1. "revenue" - your best estimate of annual revenue (number in dollars, 0 if unknown)
2. "netIncome" - your best estimate of annual net income (number in dollars, 0 if unknown)
3. "eps" - your best estimate of EPS (number, 0 if unknown)
4. "peRatio" - your best estimate of P/E ratio (number, 0 if unknown)
5. "pbRatio" - your best estimate of P/B ratio (number, 0 if unknown)
6. "evEbitda" - your best estimate of EV/EBITDA (number, 0 if unknown)
7. "risks" - exactly 3 key risks (one concise sentence each)
8. "strengths" - exactly 3 key strengths (one concise sentence each)
9. "evaluation" - a 2-3 sentence evaluation on whether this stock warrants further research

Respond ONLY with a JSON object of this shape:
{{"revenue":0,"netIncome":0,"eps":0,"peRatio":0,"pbRatio":0,"evEbitda":0,"risks":["...","...","..."],"strengths":["...","...","..."],"evaluation":"..."}}"""


def malformed_analysis() -> AIAnalysis:
    return AIAnalysis(
        risks=[PARSING_FAILED] * ITEMS_PER_LIST,
        strengths=[PARSING_FAILED] * ITEMS_PER_LIST,
        evaluation=PARSING_FAILED_EVALUATION,
        malformed=True,
    )


def _to_number(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _string_list(value: Any) -> Optional[list[str]]:
    """First three non-blank strings, or None when there are fewer."""
    if not isinstance(value, list):
        return None
    items = [str(entry).strip() for entry in value if isinstance(entry, str) and entry.strip()]
    if len(items) < ITEMS_PER_LIST:
        return None
    return items[:ITEMS_PER_LIST]


def parse_analysis(data: Optional[dict]) -> AIAnalysis:
    """
    Turn the model's JSON reply into an AIAnalysis.

    Lists longer than three are cut to the first three. Fewer than three
    usable entries, or a missing evaluation, marks the reply malformed.
    Estimates that are missing or not numeric become 0.
    """
    if not isinstance(data, dict):
        return malformed_analysis()

    risks = _string_list(data.get("risks"))
    strengths = _string_list(data.get("strengths"))
    evaluation = data.get("evaluation")
    if risks is None or strengths is None or not isinstance(evaluation, str) or not evaluation.strip():
        return malformed_analysis()

    estimates = {field: _to_number(data.get(key)) for key, field in ESTIMATE_FIELDS.items()}
    return AIAnalysis(risks=risks, strengths=strengths, evaluation=evaluation.strip(), **estimates)


async def analyze_ticker(ticker: str, data: TickerData, model=None) -> AIAnalysis:
    """
    Run the AI analysis for one ticker.

    Raises ConfigurationError when no Gemini key is configured.
    """
    model = model or get_gemini_model()
    if model is None:
        raise ConfigurationError("GEMINI_API_KEY not configured")

    response = await call_gemini_async(model, build_prompt(ticker, data))
    analysis = parse_analysis(response.data)

    if analysis.malformed:
        logger.warning("ai_analysis.malformed", ticker=ticker, response=response.text[:200])
    else:
        logger.info(
            "ai_analysis.done",
            ticker=ticker,
            input_tokens=response.input_tokens,
            output_tokens=response.output_tokens,
            cost_usd=round(calculate_cost(response), 6),
        )
    return analysis
