"""
Main Execution Script for the Clinic Visit Scheduler.
Loads (or generates) sample visit plans, books them and prints a report.
"""

import os
import sys
import logging
import json
from datetime import date
from pydantic import ValidationError

# Add current directory to path so imports work
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from demo_data.sample_factory import SampleVisitFactory
from scheduler import OPEN_ENDED_PERIOD_CAP, BookingError, VisitBooker, VisitStore
from models import RecurrenceRequest

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger("Main")

# --- CONFIGURATION ---
CACHE_FILENAME = "sample_requests.json"
USE_CACHE = True  # Set to False to force new AI generation
SAMPLE_COUNT = 10
STORE_PATH = os.environ.get("VISIT_STORE_PATH", "visits.json")
API_KEY = os.environ.get("GOOGLE_API_KEY")
DEMO_VISITOR_ID = "user-demo"
# ---------------------


def read_period_cap():
    """VISIT_PERIOD_CAP as a positive int, the default when unset, or None when invalid."""
    raw = os.environ.get("VISIT_PERIOD_CAP")
    if raw is None or not raw.strip():
        return OPEN_ENDED_PERIOD_CAP
    try:
        cap = int(raw)
    except ValueError:
        cap = 0
    if cap < 1:
        logger.error(f"❌ VISIT_PERIOD_CAP must be a positive integer, got {raw!r}")
        return None
    return cap


def save_sample_requests(requests, filename: str):
    """Cache generated plans so we don't re-query the LLM every run."""
    serializable = [r.model_dump(mode='json', by_alias=True) for r in requests]
    with open(filename, 'w') as f:
        json.dump(serializable, f, indent=2)
    logger.info(f"💾 Saved {len(requests)} sample plans to {filename}")


def load_sample_requests(filename: str):
    """
    Load cached JSON plans and re-hydrate them into RecurrenceRequest objects.
    Plans that no longer validate are skipped; an unusable file yields [].
    """
    try:
        with open(filename, 'r') as f:
            data = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError):
        logger.warning(f"⚠️ Cache file {filename} not found or invalid. Falling back to Generator.")
        return []

    if not isinstance(data, list):
        logger.warning(f"⚠️ Cache file {filename} does not hold a list. Falling back to Generator.")
        return []

    requests = []
    for i, item in enumerate(data):
        try:
            requests.append(RecurrenceRequest.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Skipping invalid cached plan {i}: {e.json()}")

    logger.info(f"📂 Loaded {len(requests)} cached sample plans from {filename}")
    return requests


def main():
    if not API_KEY and not USE_CACHE:
        logger.error("❌ GOOGLE_API_KEY not found. Please set it via 'export GOOGLE_API_KEY=...'")
        return

    period_cap = read_period_cap()
    if period_cap is None:
        return

    # --- PHASE 1: DATA ACQUISITION (Cache vs. GenAI) ---
    requests = load_sample_requests(CACHE_FILENAME) if USE_CACHE else []

    if not requests:
        if not API_KEY:
            logger.error("❌ No cached plans and no GOOGLE_API_KEY. Exiting.")
            return
        factory = SampleVisitFactory(api_key=API_KEY)
        requests, cost = factory.generate_requests(count=SAMPLE_COUNT, start_date=date.today())
        logger.info(f"💸 Estimated LLM Cost: ${cost:.4f}")
        if requests:
            save_sample_requests(requests, CACHE_FILENAME)

    if not requests:
        logger.error("❌ No data available. Exiting.")
        return

    # --- PHASE 2: BOOKING ---
    booker = VisitBooker(VisitStore(STORE_PATH), period_cap=period_cap)
    booked = []
    rejected = []

    for i, request in enumerate(requests):
        patient_id = f"patient-{i:03d}"
        try:
            booked.append(booker.book(request, patient_id=patient_id, visitor_id=DEMO_VISITOR_ID))
        except BookingError as e:
            logger.warning(f"Rejected plan for {patient_id}: {e}")
            rejected.append((patient_id, str(e)))

    # --- PHASE 3: REPORTING ---
    total_visits = sum(len(v.generated_dates) for v in booked)

    print("\n" + "=" * 50)
    print("📊 BOOKING REPORT")
    print("=" * 50)
    print(f"Plans booked:   {len(booked)}")
    print(f"Plans rejected: {len(rejected)}")
    print(f"Total visits:   {total_visits}")

    for visit in booked:
        print(f"✅ {visit.patient_id} [{visit.frequency.value}] "
              f"{len(visit.generated_dates)} visits, {visit.first_visit} -> {visit.last_visit}")

    for patient_id, reason in rejected:
        print(f"❌ {patient_id}: {reason}")


if __name__ == "__main__":
    main()
