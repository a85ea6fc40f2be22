import pytest

INVENTORY = """\
Name,IP,User,Password,Description,Port
db1,10.0.0.5,admin,secret123,Primary DB,5432
web1,10.0.0.8,deploy,,Frontend,
"""


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Keep the operator's own settings and inventory out of the tests."""
    settings_file = tmp_path / "config.yaml"
    settings_file.write_text("")
    monkeypatch.setenv("SSHMGR_CONFIG", str(settings_file))
    monkeypatch.delenv("SSHMGR_INVENTORY", raising=False)
    return settings_file


@pytest.fixture
def inventory_file(tmp_path):
    path = tmp_path / "servers.csv"
    path.write_text(INVENTORY)
    return path


class FakeKeyboard:
    def __init__(self, events):
        self.events = events

    def type(self, text):
        self.events.append(("type", text))

    def key(self, name):
        self.events.append(("key", name))


@pytest.fixture
def events():
    return []


@pytest.fixture
def keyboard(events):
    return FakeKeyboard(events)


@pytest.fixture
def sleep(events):
    return lambda seconds: events.append(("sleep", seconds))
