import pytest

from public_info_mcp_server.config_loader import ServerConfig, load_config_from_env

ENV_VARS = (
    "MCP_HTTP_HOST",
    "MCP_HTTP_PORT",
    "MCP_SERVER_NAME",
    "MCP_SERVER_VERSION",
    "MCP_USER_AGENT",
    "MCP_FETCH_TIMEOUT",
    "MCP_FLAT_ERROR_CODES",
    "MCP_LOG_LEVEL",
    "WIKI_BASE_URL",
    "BLOG_BASE_URL",
    "BLOG_FEED_PATH",
    "GITHUB_API_URL",
    "GITHUB_USER",
    "MASTODON_INSTANCE",
    "MASTODON_ACCOUNT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


def test_defaults():
    cfg = load_config_from_env()

    assert cfg == ServerConfig()
    assert cfg.user_agent == "CaseyMCP/1.0"
    assert cfg.fetch_timeout == 10.0
    assert cfg.flat_error_codes is False
    assert cfg.blog_feed_url == "https://blog.cag.wiki/feed.xml"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("MCP_HTTP_PORT", "9100")
    monkeypatch.setenv("MCP_FETCH_TIMEOUT", "2.5")
    monkeypatch.setenv("MCP_FLAT_ERROR_CODES", "yes")
    monkeypatch.setenv("WIKI_BASE_URL", "https://wiki.example.org")
    monkeypatch.setenv("BLOG_BASE_URL", "https://blog.example.org/")
    monkeypatch.setenv("BLOG_FEED_PATH", "rss.xml")
    monkeypatch.setenv("MCP_LOG_LEVEL", "DEBUG")

    cfg = load_config_from_env()

    assert cfg.server_port == 9100
    assert cfg.fetch_timeout == 2.5
    assert cfg.flat_error_codes is True
    assert cfg.wiki_base_url == "https://wiki.example.org"
    assert cfg.blog_feed_url == "https://blog.example.org/rss.xml"
    assert cfg.log_level == "debug"


def test_blank_values_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("GITHUB_USER", "   ")

    assert load_config_from_env().github_user == "caseyg"


@pytest.mark.parametrize("var, value", [("MCP_HTTP_PORT", "http"), ("MCP_FETCH_TIMEOUT", "0")])
def test_invalid_numbers_raise(monkeypatch, var, value):
    monkeypatch.setenv(var, value)

    with pytest.raises(ValueError):
        load_config_from_env()
