"""Persists the last transcription and last executed action."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class CommandHistoryStore:
    """Keeps the most recent transcription and action on disk.

    Files live under ``<data_dir>/history``:
    ``last_transcription.json`` and ``last_action.json``.
    """

    def __init__(self, data_dir: str = "./data"):
        """Initialize history store with data directory.

        Args:
            data_dir: Base directory for storing all data
        """
        self.data_dir = Path(data_dir)
        self.history_dir = self.data_dir / "history"
        self.history_dir.mkdir(parents=True, exist_ok=True)

        self.transcription_file = self.history_dir / "last_transcription.json"
        self.action_file = self.history_dir / "last_action.json"

        logger.info(f"CommandHistoryStore initialized with data_dir: {self.data_dir}")

    def save_transcription(self, text: str) -> None:
        """Record the most recent transcription."""
        self._write(self.transcription_file, {
            "transcription": text,
            "saved_at": datetime.now().isoformat(),
        })

    def save_action(self, action: str, parameters: Dict[str, str]) -> None:
        """Record the most recent action and its decoded parameters."""
        self._write(self.action_file, {
            "action": action,
            "parameters": parameters,
            "saved_at": datetime.now().isoformat(),
        })

    def load_transcription(self) -> Optional[str]:
        data = self._read(self.transcription_file)
        return data.get("transcription") if data else None

    def load_action(self) -> Optional[Dict[str, Any]]:
        data = self._read(self.action_file)
        if not data:
            return None
        return {"action": data.get("action"), "parameters": data.get("parameters", {})}

    def _write(self, path: Path, payload: Dict[str, Any]) -> None:
        tmp_path = path.with_suffix(".tmp")
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
        tmp_path.replace(path)
        logger.debug(f"Saved {path.name}")

    def _read(self, path: Path) -> Optional[Dict[str, Any]]:
        if not path.exists():
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Could not read {path}: {e}")
            return None
