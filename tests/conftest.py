import pytest

from codesphere import config


@pytest.fixture(autouse=True)
def codesphere_home(tmp_path, monkeypatch):
    home = tmp_path / "home"
    monkeypatch.setattr(config, "BASE_DIR", home)
    monkeypatch.setattr(config, "JOURNAL_DIR", home / "journal")
    monkeypatch.setattr(config, "HISTORY_FILE", home / "history.json")
    monkeypatch.setattr(config, "SESSION_FILE", home / "session.json")
    monkeypatch.setattr(config, "READLINE_FILE", home / "readline.txt")
    monkeypatch.setattr(config, "API_KEY", None)
    config.init_dirs()
    return home


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    d = tmp_path / "work"
    d.mkdir()
    monkeypatch.chdir(d)
    return d
