import os
import json
from config import DEFAULT_CONFIG, enrichment_settings, load_config, request_timeout, save_config

def test_load_config_defaults(temp_config):
    """Test that loading a non-existent config returns defaults."""
    cfg = load_config()
    assert cfg["tmdb_api_key"] == ""
    assert cfg["enrichment"] == {"batch_size": 5, "batch_delay_ms": 250}
    assert os.path.exists(temp_config)

def test_save_and_load_config(temp_config):
    """Test saving and then loading configuration."""
    import copy
    new_cfg = copy.deepcopy(DEFAULT_CONFIG)
    new_cfg["tmdb_api_key"] = "abc123"
    save_config(new_cfg)

    loaded_cfg = load_config()
    assert loaded_cfg["tmdb_api_key"] == "abc123"

def test_config_migration(temp_config):
    """Test that the legacy key is migrated to its new name."""
    with open(temp_config, "w") as f:
        json.dump({"tmdb_key": "legacy"}, f)

    cfg = load_config()
    assert cfg["tmdb_api_key"] == "legacy"
    assert "tmdb_key" not in cfg

    with open(temp_config) as f:
        assert json.load(f)["tmdb_api_key"] == "legacy"

def test_nested_defaults(temp_config):
    """Test that nested keys gain defaults if missing."""
    with open(temp_config, "w") as f:
        json.dump({"enrichment": {"batch_size": 2}}, f)

    cfg = load_config()
    assert cfg["enrichment"]["batch_size"] == 2
    assert cfg["enrichment"]["batch_delay_ms"] == 250
    assert cfg["request_timeout"] == 15

def test_corrupt_config_falls_back_to_defaults(temp_config):
    temp_config.write_text("{not json")
    assert load_config() == DEFAULT_CONFIG

def test_defaults_are_not_shared(temp_config):
    cfg = load_config()
    cfg["enrichment"]["batch_size"] = 99
    assert DEFAULT_CONFIG["enrichment"]["batch_size"] == 5

def test_enrichment_settings():
    cfg = {"tmdb_api_key": " key ", "enrichment": {"batch_size": "3", "batch_delay_ms": 1000}}
    assert enrichment_settings(cfg) == ("key", 3, 1.0)

def test_enrichment_settings_bad_values():
    cfg = {"tmdb_api_key": None, "enrichment": {"batch_size": 0, "batch_delay_ms": "soon"}}
    assert enrichment_settings(cfg) == ("", 5, 0.25)
    assert enrichment_settings({"enrichment": "off"}) == ("", 5, 0.25)

def test_request_timeout():
    assert request_timeout({"request_timeout": 30}) == 30
    assert request_timeout({"request_timeout": -1}) == 15
    assert request_timeout({"request_timeout": "slow"}) == 15
    assert request_timeout({}) == 15
