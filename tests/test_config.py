from roster_recon.config import ReconConfig, get_config, reset_config


def test_defaults():
    config = ReconConfig(_env_file=None)
    assert config.classroom_base_url == "https://classroom.googleapis.com/v1"
    assert config.allow_swapped_names is False
    assert config.page_size == 100
    assert config.max_history == 10


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("ROSTER_RECON_ALLOW_SWAPPED_NAMES", "true")
    monkeypatch.setenv("ROSTER_RECON_STATE_DIR", "/tmp/roster-state")
    config = ReconConfig(_env_file=None)
    assert config.allow_swapped_names is True
    assert config.state_dir == "/tmp/roster-state"


def test_get_config_is_cached():
    first = get_config()
    assert get_config() is first
    reset_config()
    assert get_config() is not first
