"""Unit tests for CommandHistoryStore."""

import json

import pytest

from voicecmd.storage.history_store import CommandHistoryStore


@pytest.mark.unit
class TestCommandHistoryStore:
    """Test cases for CommandHistoryStore."""

    def test_creates_history_directory(self, temp_data_dir):
        store = CommandHistoryStore(temp_data_dir)

        assert store.history_dir.is_dir()
        assert store.load_transcription() is None
        assert store.load_action() is None

    def test_last_transcription_wins(self, temp_data_dir):
        store = CommandHistoryStore(temp_data_dir)
        store.save_transcription("call mom")
        store.save_transcription("open WhatsApp")

        assert store.load_transcription() == "open WhatsApp"
        assert CommandHistoryStore(temp_data_dir).load_transcription() == "open WhatsApp"

    def test_action_with_parameters(self, temp_data_dir):
        store = CommandHistoryStore(temp_data_dir)
        store.save_action("call John", {"contact": "John"})

        assert store.load_action() == {"action": "call John", "parameters": {"contact": "John"}}

        with open(store.action_file, encoding='utf-8') as f:
            saved = json.load(f)
        assert "saved_at" in saved
        assert not store.action_file.with_suffix(".tmp").exists()

    def test_corrupt_file_is_ignored(self, temp_data_dir):
        store = CommandHistoryStore(temp_data_dir)
        store.transcription_file.write_text("{not json")

        assert store.load_transcription() is None
