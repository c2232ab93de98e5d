"""
Build log sink for plain informational and error lines.
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional


class EntryTypes:
    BUILD = "BUILD"
    ERROR = "ERROR"


class BuildLog:
    """
    Collects the lines shown to the pipeline operator.

    Every entry is kept in order and also forwarded to a standard logger.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("streamwright.build")
        self.entries: List[Dict[str, Any]] = []

    def _add(self, entry_type: str, message: str) -> None:
        self.entries.append({
            "ts": datetime.now().isoformat(),
            "type": entry_type,
            "message": message
        })

    def info(self, message: str) -> None:
        self._add(EntryTypes.BUILD, message)
        self.logger.info(message)

    def error(self, message: str) -> None:
        self._add(EntryTypes.ERROR, message)
        self.logger.error(message)

    def lines(self) -> List[str]:
        return [entry["message"] for entry in self.entries]

    def errors(self) -> List[str]:
        return [entry["message"] for entry in self.entries if entry["type"] == EntryTypes.ERROR]

    def to_ndjson(self) -> str:
        """Render all entries as newline-delimited JSON."""
        return "".join(json.dumps(entry) + "\n" for entry in self.entries)
