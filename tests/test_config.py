"""Unit tests for configuration loading."""

import yaml

from genre_recommender.config import ConfigLoader, get_config, reset_config


class TestConfigLoader:
    """Tests for ConfigLoader."""

    def test_missing_file_uses_defaults(self, tmp_path):
        config = ConfigLoader(str(tmp_path / "absent.yaml"))

        assert config.get("embedding.model") == "nomic-embed-text"
        assert config.get("serving.default_count") == 5

    def test_yaml_values_override_defaults(self, tmp_path, monkeypatch):
        monkeypatch.delenv("RECOMMENDER_DATA_DIR", raising=False)
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump({
            "storage": {"data_dir": "/srv/catalogs"},
            "embedding": {"model": "all-minilm"},
        }))

        config = ConfigLoader(str(path))

        assert config.get("storage.data_dir") == "/srv/catalogs"
        assert config.get("embedding.model") == "all-minilm"
        # untouched keys keep their defaults
        assert config.get("embedding.timeout_seconds") == 30

    def test_env_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("OLLAMA_URL", "http://embedder:11434/api/embeddings")

        config = ConfigLoader(str(tmp_path / "absent.yaml"))

        assert config.get("embedding.url") == "http://embedder:11434/api/embeddings"
        assert config.get("storage.data_dir") == str(tmp_path)

    def test_get_with_default(self, tmp_path):
        config = ConfigLoader(str(tmp_path / "absent.yaml"))

        assert config.get("does.not.exist", "fallback") == "fallback"

    def test_section_is_plain_dict(self, tmp_path):
        config = ConfigLoader(str(tmp_path / "absent.yaml"))

        section = config.get("embedding")

        assert isinstance(section, dict)
        assert section["model"] == "nomic-embed-text"

    def test_save_round_trip(self, tmp_path):
        config = ConfigLoader(str(tmp_path / "absent.yaml"))
        out = tmp_path / "saved.yaml"

        config.save(str(out))

        assert yaml.safe_load(out.read_text()) == config.to_dict()


class TestGlobalConfig:

    def test_singleton(self):
        assert get_config() is get_config()

    def test_reset(self):
        first = get_config()
        reset_config()

        assert get_config() is not first
