"""Tests for the process entry point."""
import main


class _FakeServer:
    def __init__(self):
        self.transport = None

    def run(self, transport):
        self.transport = transport


def test_main_exits_when_dataset_cannot_load(tmp_path, monkeypatch):
    monkeypatch.setenv("SUPPORT_DATA_PATH", str(tmp_path / "missing.json"))
    monkeypatch.setenv("SUPPORT_TRANSPORT", "stdio")
    monkeypatch.setattr(main, "create_server", _unexpected_create_server)
    assert main.main() == 1


def test_main_builds_server_from_loaded_store(monkeypatch):
    monkeypatch.delenv("SUPPORT_DATA_PATH", raising=False)
    monkeypatch.setenv("SUPPORT_TRANSPORT", "stdio")
    fake = _FakeServer()
    captured = {}

    def fake_create_server(store, settings):
        captured["store"] = store
        captured["settings"] = settings
        return fake

    monkeypatch.setattr(main, "create_server", fake_create_server)
    assert main.main() == 0
    assert fake.transport == "stdio"
    assert captured["store"].customers[0].id == "ENT-001"


def _unexpected_create_server(*args):
    raise AssertionError("server must not be created when loading fails")
