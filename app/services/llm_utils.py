"""
LLM Utilities
=============

Stateless helpers for calling Gemini from the watchlist analysis.

CONTENTS
--------
- Gemini model initialization
- JSON-mode calls with robust response parsing
- Cost tracking

USAGE
-----
    from app.services.llm_utils import get_gemini_model, call_gemini_async

    model = get_gemini_model()
    response = await call_gemini_async(model, prompt)
    if response.data is None:
        ...  # model answered with something that is not JSON
"""

import asyncio
from dataclasses import dataclass
from typing import Optional

from app.core.config import get_settings
from app.services.utils import parse_json_robust

JSON_GENERATION_CONFIG = {
    "temperature": 0.1,
    "response_mime_type": "application/json",
}


@dataclass
class LLMResponse:
    """Standardized LLM response."""
    text: str
    data: Optional[dict] = None  # Parsed JSON if requested
    input_tokens: int = 0
    output_tokens: int = 0
    model: Optional[str] = None


def get_gemini_model(model_name: Optional[str] = None):
    """
    Get a configured Gemini model.

    PARAMETERS
    ----------
    model_name : str
        Model to use (default: settings.gemini_model)

    RETURNS
    -------
    GenerativeModel or None
        Configured model, or None if API key not available
    """
    import google.generativeai as genai

    settings = get_settings()
    if not settings.gemini_api_key:
        return None

    genai.configure(api_key=settings.gemini_api_key)
    return genai.GenerativeModel(model_name or settings.gemini_model)


def call_gemini(
    model,
    prompt: str,
    parse_json: bool = True,
    generation_config: Optional[dict] = None,
) -> LLMResponse:
    """
    Call Gemini model and optionally parse JSON response.

    STEPS
    -----
    1. Call model.generate_content() in JSON mode
    2. Extract text from response
    3. Parse JSON if requested (data stays None when parsing fails)
    4. Return standardized LLMResponse
    """
    response = model.generate_content(
        prompt,
        generation_config=generation_config or JSON_GENERATION_CONFIG,
    )
    text = response.text

    data = None
    if parse_json:
        try:
            data = parse_json_robust(text)
        except ValueError:
            data = None

    input_tokens = 0
    output_tokens = 0
    if hasattr(response, 'usage_metadata'):
        input_tokens = getattr(response.usage_metadata, 'prompt_token_count', 0) or 0
        output_tokens = getattr(response.usage_metadata, 'candidates_token_count', 0) or 0

    return LLMResponse(
        text=text,
        data=data,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        model=model.model_name if hasattr(model, 'model_name') else "gemini",
    )


async def call_gemini_async(
    model,
    prompt: str,
    parse_json: bool = True,
) -> LLMResponse:
    """Run call_gemini in the default executor; the SDK call blocks."""
    loop = asyncio.get_event_loop()
    return await loop.run_in_executor(None, lambda: call_gemini(model, prompt, parse_json))


# Cost per 1M tokens (in USD)
COST_PER_MILLION = {
    "gemini-2.0-flash": {"input": 0.10, "output": 0.40},
    "gemini-2.5-flash": {"input": 0.30, "output": 2.50},
    "gemini-2.5-pro": {"input": 1.25, "output": 10.00},
}


def calculate_cost(response: LLMResponse) -> float:
    """Cost of an LLM call in USD. Unknown models cost 0."""
    model = (response.model or "").removeprefix("models/")
    costs = COST_PER_MILLION.get(model, {"input": 0, "output": 0})

    input_cost = (response.input_tokens / 1_000_000) * costs["input"]
    output_cost = (response.output_tokens / 1_000_000) * costs["output"]

    return input_cost + output_cost
