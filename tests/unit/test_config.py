"""Unit tests for configuration loading."""

from pathlib import Path

import pytest
import yaml

from voicecmd.config import DEFAULT_CONFIG, VoiceCommandConfig


def _write_config(directory, content):
    path = Path(directory) / "voicecmd.yaml"
    path.write_text(content if isinstance(content, str) else yaml.safe_dump(content))
    return str(path)


@pytest.mark.unit
class TestVoiceCommandConfig:
    """Test cases for VoiceCommandConfig."""

    def test_defaults_without_file(self):
        config = VoiceCommandConfig()

        assert config.get('recording.silence_timeout_ms') == 3000
        assert config.get('recording.max_duration_ms') == 15000
        assert config.get('audio.sample_rate') == 16000
        assert config.get('missing.key', 'fallback') == 'fallback'

    def test_defaults_are_not_shared(self):
        config = VoiceCommandConfig()
        config.set('recording.silence_timeout_ms', 1)

        assert DEFAULT_CONFIG['recording']['silence_timeout_ms'] == 3000

    def test_file_overrides_merge_with_defaults(self, temp_data_dir):
        path = _write_config(temp_data_dir, {"recording": {"silence_timeout_ms": 2000}})

        config = VoiceCommandConfig(path)

        assert config.get('recording.silence_timeout_ms') == 2000
        assert config.get('recording.max_duration_ms') == 15000
        assert config.get('openai.model') == 'gpt-4o-mini'

    def test_relative_paths_resolve_against_config_dir(self, temp_data_dir):
        path = _write_config(temp_data_dir, {
            "google_cloud": {"credentials_path": "creds/google.json"},
            "storage": {"data_directory": "store"},
        })

        config = VoiceCommandConfig(path)

        assert config.get('google_cloud.credentials_path') == str(Path(temp_data_dir) / "creds/google.json")
        assert config.get_data_directory() == str((Path(temp_data_dir) / "store").absolute())
        assert config.get('logging.file_path') == str(Path(temp_data_dir) / "data/logs/voicecmd.log")

    def test_missing_file(self, temp_data_dir):
        with pytest.raises(FileNotFoundError):
            VoiceCommandConfig(str(Path(temp_data_dir) / "nope.yaml"))

    @pytest.mark.parametrize("content", ["", "recording: [unclosed", "- just\n- a list\n"])
    def test_invalid_files(self, temp_data_dir, content):
        path = _write_config(temp_data_dir, content)

        with pytest.raises(ValueError):
            VoiceCommandConfig(path)

    def test_set_creates_nested_keys(self):
        config = VoiceCommandConfig()
        config.set('openai.api_key', 'sk-from-config')
        config.set('new.section.value', 42)

        assert config.get('openai.api_key') == 'sk-from-config'
        assert config.get('new.section.value') == 42

    def test_openai_key_prefers_config(self, monkeypatch):
        monkeypatch.setenv('OPENAI_API_KEY', 'sk-from-env')
        config = VoiceCommandConfig()

        assert config.get_openai_api_key() == 'sk-from-env'

        config.set('openai.api_key', 'sk-from-config')
        assert config.get_openai_api_key() == 'sk-from-config'

    def test_openai_key_missing(self, monkeypatch):
        monkeypatch.delenv('OPENAI_API_KEY', raising=False)

        with pytest.raises(ValueError):
            VoiceCommandConfig().get_openai_api_key()

    def test_google_credentials(self, temp_data_dir):
        config = VoiceCommandConfig()
        with pytest.raises(ValueError):
            config.get_google_credentials_path()

        config.set('google_cloud.credentials_path', str(Path(temp_data_dir) / "absent.json"))
        with pytest.raises(FileNotFoundError):
            config.get_google_credentials_path()

        creds = Path(temp_data_dir) / "google.json"
        creds.write_text("{}")
        config.set('google_cloud.credentials_path', str(creds))
        assert config.get_google_credentials_path() == str(creds.absolute())
