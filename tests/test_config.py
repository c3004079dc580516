import pytest
import yaml

from swipeprobe.config import DEFAULT_CONFIG, load_config, write_default_config


def test_defaults_without_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    cfg = load_config(environ={})
    assert cfg["app"]["bundle_id"] == "us.zig.zpod"
    assert cfg["swipe"]["defaults_suite"] == "us.zig.zpod.swipe-uitests"
    assert cfg["device"]["udid"] is None
    assert cfg["env"] == {}


def test_file_values_merge_over_defaults(tmp_path):
    path = tmp_path / "swipeprobe.yaml"
    path.write_text(yaml.safe_dump({
        "app": {"bundle_id": "com.example.pods"},
        "device": {"udid": "ABC"},
        "env": {"UITEST_OFFLINE_MODE": 1},
        "timeouts": {"scale": 2.0},
    }))
    cfg = load_config(str(path), environ={})
    assert cfg["app"]["bundle_id"] == "com.example.pods"
    assert cfg["app"]["app_path"] is None
    assert cfg["device"]["udid"] == "ABC"
    assert cfg["device"]["name"] == DEFAULT_CONFIG["device"]["name"]
    assert cfg["env"] == {"UITEST_OFFLINE_MODE": "1"}
    assert cfg["timeouts"]["scale"] == 2.0


def test_environment_overrides_file(tmp_path):
    path = tmp_path / "swipeprobe.yaml"
    path.write_text("device:\n  udid: FROM-FILE\n")
    cfg = load_config(str(path), environ={"SWIPEPROBE_UDID": "FROM-ENV", "SWIPEPROBE_BUNDLE_ID": "x.y"})
    assert cfg["device"]["udid"] == "FROM-ENV"
    assert cfg["app"]["bundle_id"] == "x.y"


def test_defaults_are_not_mutated(tmp_path):
    path = tmp_path / "swipeprobe.yaml"
    path.write_text("swipe:\n  defaults_suite: changed\n")
    load_config(str(path), environ={})
    assert DEFAULT_CONFIG["swipe"]["defaults_suite"] == "us.zig.zpod.swipe-uitests"


def test_missing_explicit_path(tmp_path):
    with pytest.raises(FileNotFoundError, match="swipeprobe init"):
        load_config(str(tmp_path / "missing.yaml"), environ={})


def test_top_level_must_be_mapping(tmp_path):
    path = tmp_path / "swipeprobe.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ValueError):
        load_config(str(path), environ={})


def test_starter_config_loads_cleanly(tmp_path):
    path = write_default_config(str(tmp_path / "swipeprobe.yaml"))
    cfg = load_config(str(path), environ={})
    assert cfg["profile"] == "swipe-configuration"
    assert cfg["env"] == {}
    assert cfg["timeouts"]["scale"] is None


def test_write_refuses_to_overwrite(tmp_path):
    path = tmp_path / "swipeprobe.yaml"
    path.write_text("verbose: true\n")
    with pytest.raises(FileExistsError):
        write_default_config(str(path))
    write_default_config(str(path), force=True)
    assert "swipeprobe configuration" in path.read_text()
