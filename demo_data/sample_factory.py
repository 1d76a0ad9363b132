"""
LLM-powered sample data generator for the Clinic Visit Scheduler.
STRATEGY: one batched request for all sample plans, then strict pydantic validation.
"""

import os
import json
import logging
import re
import google.generativeai as genai
from typing import List, Tuple, Any
from datetime import date
from pydantic import ValidationError

from models import RecurrenceRequest

logger = logging.getLogger(__name__)

MODEL_NAME = "gemini-2.5-flash"

# USD per million tokens
INPUT_TOKEN_PRICE = 0.075
OUTPUT_TOKEN_PRICE = 0.30

FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL)
LIST_KEYS = ('requests', 'plans', 'visits', 'result')


def _decode_first_value(text: str) -> Any:
    """Decode the first JSON array or object in `text`, ignoring chatter around it."""
    decoder = json.JSONDecoder()
    for i, char in enumerate(text):
        if char not in '[{':
            continue
        try:
            value, _ = decoder.raw_decode(text, i)
        except json.JSONDecodeError:
            continue
        return value
    return None


def parse_json_list(raw_text: str) -> List[Any]:
    """
    Pull a list of plan objects out of a model reply.
    Accepts fenced blocks, leading prose, a bare object, or an object wrapping the list.
    """
    if not raw_text:
        return []

    fenced = FENCE_RE.search(raw_text)
    text = fenced.group(1) if fenced else raw_text.strip()

    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        data = _decode_first_value(text)

    if isinstance(data, dict):
        wrapped = next((data[k] for k in LIST_KEYS if isinstance(data.get(k), list)), None)
        return wrapped if wrapped is not None else [data]
    return data if isinstance(data, list) else []


def estimate_cost(prompt_tokens: int, response_tokens: int) -> float:
    return (prompt_tokens * INPUT_TOKEN_PRICE + response_tokens * OUTPUT_TOKEN_PRICE) / 1_000_000


def normalise_request(item: dict) -> dict:
    """Light clean-up of common LLM drift before validation."""
    if 'frequency' in item:
        item['frequency'] = str(item['frequency']).strip().lower()
    slots = item.get('timeSlots')
    if isinstance(slots, list) and 'visitsPerPeriod' not in item:
        item['visitsPerPeriod'] = len(slots)
    return item


class SampleVisitFactory:
    def __init__(self, api_key: str | None = None):
        self.api_key = api_key or os.environ.get("GOOGLE_API_KEY")
        if not self.api_key:
            raise ValueError("GOOGLE_API_KEY not found. Please set it in environment.")

        genai.configure(api_key=self.api_key)
        self.model = genai.GenerativeModel(MODEL_NAME)
        self.total_cost = 0.0

    def _build_prompt(self, count: int, start_date: date) -> str:
        return f"""
        Generate {count} recurring home-visit plans for a rehabilitation clinic starting on or after {start_date}.

        OUTPUT FORMAT:
        A single valid JSON Array containing {count} objects.

        STRICT SCHEMA RULES:

        1. "frequency": one of ["daily", "weekly", "monthly"].
        2. "startDate": "YYYY-MM-DD".
        3. "timeSlots": list of objects, one per visit in each period.
           - "time": 24-hour "HH:MM" (e.g. "09:00", "14:30").
           - weekly plans: "dayOfWeek" integer 0-6 (0 = Sunday).
           - monthly plans: "dayOfMonth" integer 1-31.
        4. "visitsPerPeriod": integer equal to the number of timeSlots (1-3).
        5. Termination: include EXACTLY ONE of
           - "endDate": "YYYY-MM-DD" after startDate, or
           - "occurrences": integer 1-12 (number of days/weeks/months).

        Mix all three frequencies.
        """

    def generate_requests(self, count: int = 10, start_date: date = None) -> Tuple[List[RecurrenceRequest], float]:
        """
        Ask the model for `count` sample plans.
        Returns the plans that validated plus the estimated cost of the call.
        """
        if start_date is None:
            start_date = date.today()

        prompt = self._build_prompt(count, start_date)
        logger.info(f"🚀 Requesting {count} sample visit plans...")

        try:
            generation_config = genai.GenerationConfig(
                response_mime_type="application/json",
                max_output_tokens=8000,
                temperature=0.7
            )
            response = self.model.generate_content(prompt, generation_config=generation_config)

            cost = 0.0
            usage = getattr(response, 'usage_metadata', None)
            if usage is not None:
                cost = estimate_cost(usage.prompt_token_count, usage.candidates_token_count)
            self.total_cost += cost

            # .text raises ValueError when the candidate was blocked or has no parts
            raw_items = parse_json_list(response.text)
        except Exception as e:
            # The client surfaces transport, quota and safety failures with differing types
            logger.error(f"Sample generation failed: {e}")
            return [], 0.0

        requests = []
        for i, item in enumerate(raw_items):
            if not isinstance(item, dict):
                logger.warning(f"Skipping non-object item {i} in batch")
                continue
            try:
                requests.append(RecurrenceRequest.model_validate(normalise_request(item)))
            except ValidationError as e:
                logger.warning(f"Skipping invalid item {i} in batch: {e.json()}")

        logger.info(f"✅ Generated {len(requests)} valid sample plans.")
        return requests, cost
