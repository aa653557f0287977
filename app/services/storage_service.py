"""Storage service for saved calculations.

Saved calculations live in a single JSON file shaped as
``{"calculations": [{id, name, timestamp, inputParams, results}, ...]}``.
Engine result records are converted to plain JSON structures on save.
"""

import json
import logging
import time
from dataclasses import asdict, is_dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from app.config import get_config
from app.schemas import SavedCalculation, StorageError

logger = logging.getLogger(__name__)


def to_jsonable(value: Any) -> Any:
    """Convert dataclasses, enums, tuples and numpy scalars to JSON types."""
    if is_dataclass(value) and not isinstance(value, type):
        return to_jsonable(asdict(value))
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    if hasattr(value, "item") and callable(value.item):
        return value.item()
    return value


class StorageService:
    """Service for persisting named calculations."""

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path or get_config().storage_path)

    # ------------------------- File access ------------------------- #
    def _load(self) -> Dict[str, List[Dict[str, Any]]]:
        if not self.path.exists():
            return {"calculations": []}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read saved calculations from {self.path}: {e}")
            return {"calculations": []}
        if not isinstance(data, dict) or not isinstance(data.get("calculations"), list):
            logger.warning(f"Ignoring malformed calculations file {self.path}")
            return {"calculations": []}

        valid = []
        for entry in data["calculations"]:
            if isinstance(entry, dict) and "id" in entry:
                valid.append(entry)
            else:
                logger.warning(f"Skipping malformed saved calculation in {self.path}: {entry!r}")
        data["calculations"] = valid
        return data

    def _save(self, data: Dict[str, List[Dict[str, Any]]]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            with tmp_path.open("w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            tmp_path.replace(self.path)
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to write saved calculations to {self.path}: {e}")

    # ------------------------- Operations ------------------------- #
    def _new_id(self, existing_ids) -> str:
        stamp = int(time.time() * 1000)
        calc_id = f"calc_{stamp}"
        while calc_id in existing_ids:
            stamp += 1
            calc_id = f"calc_{stamp}"
        return calc_id

    def save_calculation(
        self, name: str, input_params: Dict[str, Any], results: Any
    ) -> SavedCalculation:
        """Append a named calculation and return the stored record."""
        data = self._load()
        existing_ids = {calc.get("id") for calc in data["calculations"]}
        calculation = SavedCalculation(
            id=self._new_id(existing_ids),
            name=name,
            timestamp=datetime.now(timezone.utc).isoformat(),
            input_params=to_jsonable(input_params),
            results=to_jsonable(results),
        )
        data["calculations"].append(calculation.to_dict())
        self._save(data)
        logger.info(f"Saved calculation '{name}' as {calculation.id}")
        return calculation

    def get_all_calculations(self) -> List[SavedCalculation]:
        return [SavedCalculation.from_dict(calc) for calc in self._load()["calculations"]]

    def get_calculation(self, calc_id: str) -> Optional[SavedCalculation]:
        for calc in self.get_all_calculations():
            if calc.id == calc_id:
                return calc
        return None

    def delete_calculation(self, calc_id: str) -> bool:
        """Remove a calculation; returns False when the id is unknown."""
        data = self._load()
        remaining = [calc for calc in data["calculations"] if calc.get("id") != calc_id]
        if len(remaining) == len(data["calculations"]):
            return False
        data["calculations"] = remaining
        self._save(data)
        logger.info(f"Deleted calculation {calc_id}")
        return True

    def clear(self) -> None:
        if self.path.exists():
            try:
                self.path.unlink()
            except OSError as e:
                raise StorageError(f"Failed to remove {self.path}: {e}")

    # ------------------------- Export / import ------------------------- #
    def export_json(self, calc_id: Optional[str] = None) -> str:
        """Serialize one calculation, or all of them when ``calc_id`` is None."""
        if calc_id is not None:
            calculation = self.get_calculation(calc_id)
            if calculation is None:
                raise StorageError(f"Calculation {calc_id} not found")
            payload: Dict[str, Any] = calculation.to_dict()
        else:
            payload = {"calculations": [calc.to_dict() for calc in self.get_all_calculations()]}
        return json.dumps(payload, ensure_ascii=False, indent=2)

    def import_json(self, text: str) -> int:
        """Merge exported calculations, skipping ids already stored.

        Returns:
            Number of calculations added
        """
        try:
            imported = json.loads(text)
        except json.JSONDecodeError as e:
            raise StorageError(f"Invalid import data: {e}")

        if isinstance(imported, dict) and isinstance(imported.get("calculations"), list):
            candidates = imported["calculations"]
        elif isinstance(imported, dict) and "id" in imported:
            candidates = [imported]
        else:
            raise StorageError("Invalid import data format")

        data = self._load()
        existing_ids = {calc.get("id") for calc in data["calculations"]}
        added = 0
        for candidate in candidates:
            calculation = SavedCalculation.from_dict(candidate)
            if calculation.id in existing_ids:
                continue
            data["calculations"].append(calculation.to_dict())
            existing_ids.add(calculation.id)
            added += 1

        if added:
            self._save(data)
        logger.info(f"Imported {added} calculation(s)")
        return added
