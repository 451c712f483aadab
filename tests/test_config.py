import pytest

from joern import ClientConfig, JoernClient


def test_defaults():
    config = ClientConfig()
    assert config.base_url == "localhost:8080"
    assert config.buffer_size == 36
    assert config.timeout == 3600.0
    assert config.http_url == "http://localhost:8080"
    assert config.ws_url == "ws://localhost:8080"
    assert not config.has_credentials


@pytest.mark.parametrize(
    "username, password, expected",
    [
        ("joern", "secret", True),
        ("joern", "", False),
        ("", "secret", False),
        ("  ", "secret", False),
        ("joern", " \t", False),
    ],
)
def test_credentials_need_both_non_blank(username, password, expected):
    assert ClientConfig(username=username, password=password).has_credentials is expected


@pytest.mark.parametrize("field", ["buffer_size", "timeout"])
def test_rejects_non_positive(field):
    with pytest.raises(ValueError):
        ClientConfig(**{field: 0})


def test_config_is_immutable():
    config = ClientConfig()
    with pytest.raises(AttributeError):
        config.base_url = "elsewhere:1"
    changed = config.replace(base_url="elsewhere:1")
    assert changed.base_url == "elsewhere:1"
    assert config.base_url == "localhost:8080"


def test_from_env(monkeypatch):
    monkeypatch.setenv("JOERN_BASE_URL", "joern.internal:9000")
    monkeypatch.setenv("JOERN_USER", "alice")
    monkeypatch.setenv("JOERN_PASSWORD", "pw")
    monkeypatch.setenv("JOERN_BUFFER_SIZE", "64")
    monkeypatch.setenv("JOERN_TIMEOUT", "30")
    config = ClientConfig.from_env()
    assert config == ClientConfig(
        base_url="joern.internal:9000",
        username="alice",
        password="pw",
        buffer_size=64,
        timeout=30.0,
    )


def test_from_env_falls_back_to_defaults(monkeypatch):
    for name in ("BASE_URL", "USER", "PASSWORD", "BUFFER_SIZE", "TIMEOUT"):
        monkeypatch.delenv(f"JOERN_{name}", raising=False)
    assert ClientConfig.from_env() == ClientConfig()


def test_client_http_transport_follows_config():
    client = JoernClient(ClientConfig(base_url="joern:1234", timeout=12, username="u", password="p"))
    assert client._http.base_url.host == "joern"
    assert client._http.base_url.port == 1234
    assert client._http.timeout.read == 12
    assert client._ws_headers() == {"Authorization": "Basic dTpw"}


def test_client_without_credentials_sends_no_auth():
    client = JoernClient()
    assert client._http.auth is None
    assert client._ws_headers() == {}
