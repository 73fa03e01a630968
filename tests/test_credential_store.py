from PyQt6.QtCore import QSettings

from optical_axis_app.ui.credential_store import CredentialStore


def _store(tmp_path):
    return CredentialStore(QSettings(str(tmp_path / "settings.ini"), QSettings.Format.IniFormat))


def test_key_round_trips_through_settings_file(tmp_path, monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    _store(tmp_path).set_api_key("  secret-key  ")

    reopened = _store(tmp_path)
    assert reopened.has_stored_key()
    assert reopened.api_key() == "secret-key"


def test_clearing_key_falls_back_to_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "env-key")
    store = _store(tmp_path)
    store.set_api_key("stored")
    assert store.api_key() == "stored"

    store.set_api_key("")
    assert not store.has_stored_key()
    assert store.api_key() == "env-key"
