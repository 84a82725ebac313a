"""Append-only JSON file copy of created hotels.

Best effort: the file is not read by the API and is not updated on edits or
deletes. Appends from concurrent requests are serialized by a lock held
for the whole read-modify-write.
"""

import json
import logging
import os
import threading
from typing import Any, Dict, List, Optional

logger = logging.getLogger("hotel-booking.mirror")


class HotelMirror:
    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()

    def _load(self) -> List[Dict[str, Any]]:
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError):
            return []
        return data if isinstance(data, list) else []

    def append(self, hotel: Dict[str, Any]) -> None:
        with self._lock:
            records = self._load()
            records.append(hotel)
            try:
                with open(self.path, "w", encoding="utf-8") as fh:
                    json.dump(records, fh, indent=2, default=str)
            except OSError as e:
                logger.warning("Could not write hotel mirror %s: %s", self.path, e)


def mirror_from_env() -> Optional[HotelMirror]:
    path = os.getenv("HOTELS_MIRROR_FILE")
    return HotelMirror(path) if path else None
