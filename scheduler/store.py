"""
Visit Record Store.

This module acts as the 'Memory' of the system: a JSON file holding every
booked ScheduledVisit. Mutations return a bool (True = written) and never
raise on I/O trouble; failures are logged instead.
"""

import json
import logging
import os
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from models import ScheduledVisit

logger = logging.getLogger(__name__)


class VisitStore:
    """
    File-backed record store keyed by the visit id.
    The file is re-read on every call so separate processes see each other's writes.
    """

    def __init__(self, path: str):
        self.path = path

    # --- Low-level I/O ---

    def _read(self) -> List[Dict[str, Any]]:
        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error reading visit store {self.path}: {e}")
            return []

        if not isinstance(data, list):
            logger.error(f"Visit store {self.path} does not contain a list; ignoring it")
            return []
        return data

    def _write(self, visits: List[ScheduledVisit]) -> bool:
        payload = [v.model_dump(mode='json', by_alias=True) for v in visits]
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, 'w') as f:
                json.dump(payload, f, indent=2)
        except OSError as e:
            logger.error(f"Error writing visit store {self.path}: {e}")
            return False
        return True

    # --- Queries ---

    def get_all(self) -> List[ScheduledVisit]:
        """Re-hydrate every stored record, skipping ones that no longer validate."""
        visits = []
        for i, item in enumerate(self._read()):
            try:
                visits.append(ScheduledVisit.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping invalid visit record {i}: {e.json()}")
        return visits

    def get_by_id(self, visit_id: str) -> Optional[ScheduledVisit]:
        return next((v for v in self.get_all() if v.id == visit_id), None)

    def get_by_patient_id(self, patient_id: str) -> List[ScheduledVisit]:
        return [v for v in self.get_all() if v.patient_id == patient_id]

    # --- Mutations ---

    def add(self, visit: ScheduledVisit) -> bool:
        visits = self.get_all()
        visits.append(visit)
        return self._write(visits)

    def update(self, visit_id: str, **changes: Any) -> bool:
        """
        Merge `changes` (Python field names) into the record.
        False if the id is unknown or a key is not a ScheduledVisit field.
        """
        unknown = sorted(set(changes) - set(ScheduledVisit.model_fields))
        if unknown:
            logger.error(f"Refusing to update {visit_id}: unknown field(s) {', '.join(unknown)}")
            return False

        visits = self.get_all()
        for i, visit in enumerate(visits):
            if visit.id == visit_id:
                visits[i] = ScheduledVisit.model_validate({**visit.model_dump(), **changes})
                return self._write(visits)
        return False

    def delete(self, visit_id: str) -> bool:
        return self._write([v for v in self.get_all() if v.id != visit_id])

    def delete_by_patient_id(self, patient_id: str) -> bool:
        return self._write([v for v in self.get_all() if v.patient_id != patient_id])

    def clear(self) -> bool:
        return self._write([])

    # --- Backup / Restore ---

    def export_data(self) -> Dict[str, Any]:
        return {
            "visits": [v.model_dump(mode='json', by_alias=True) for v in self.get_all()],
            "exportedAt": datetime.now().isoformat()
        }

    def import_data(self, data: Dict[str, Any]) -> bool:
        """Replace the stored visits with `data['visits']` when present."""
        if "visits" not in data:
            return True
        try:
            visits = [ScheduledVisit.model_validate(item) for item in data["visits"]]
        except ValidationError as e:
            logger.error(f"Error importing visits: {e}")
            return False
        return self._write(visits)
