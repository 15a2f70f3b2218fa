import json

import pytest

from latarchiver.core.accelerator import reset_accelerator_cache
from latarchiver.core.archive import ArchiveFormat, GpuBackend
from latarchiver.utils.preferences import Preferences


def test_defaults():
    prefs = Preferences()

    assert prefs.archive_format() == ArchiveFormat.ZIP
    assert prefs.compression_level == 6
    assert prefs.gpu_backend == "auto"
    assert prefs.accelerator_order == ["cuda", "vulkan"]


def test_save_and_load_round_trip(tmp_path):
    path = tmp_path / "preferences.json"
    prefs = Preferences(default_format="7z", compression_level=9, gpu_backend="none", accelerator_order=["vulkan"])
    prefs.save_preferences(path)

    loaded = Preferences()
    loaded.load_preferences(path)

    assert loaded == prefs
    assert json.loads(path.read_text(encoding="utf-8"))["default_format"] == "7z"


def test_missing_file_keeps_defaults(tmp_path):
    prefs = Preferences()
    prefs.load_preferences(tmp_path / "absent.json")
    assert prefs == Preferences()


@pytest.mark.parametrize("content", ["{not json", "[1, 2, 3]"])
def test_malformed_file_keeps_defaults(tmp_path, caplog, content):
    path = tmp_path / "preferences.json"
    path.write_text(content, encoding="utf-8")

    prefs = Preferences()
    prefs.load_preferences(path)

    assert prefs == Preferences()
    assert "preferences" in caplog.text


def test_unknown_keys_are_ignored(tmp_path):
    path = tmp_path / "preferences.json"
    path.write_text(json.dumps({"compression_level": 3, "theme": "dark"}), encoding="utf-8")

    prefs = Preferences()
    prefs.load_preferences(path)

    assert prefs.compression_level == 3
    assert not hasattr(prefs, "theme")


def test_compression_options():
    options = Preferences(compression_level=12, gpu_backend="cuda").compression_options(password="pw")

    assert options.level == 9
    assert options.backend == GpuBackend.CUDA
    assert options.password == "pw"
    assert "pw" not in repr(options)


def test_create_registry_without_gpu():
    reset_accelerator_cache()
    registry = Preferences(compression_level=1, gpu_backend="none").create_registry()

    assert registry.get("zip").level == 1
    assert registry.get("lat").accelerator is None
