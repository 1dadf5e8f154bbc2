import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


ATOM_HEADER = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
)

ENTRY_BODY = """
  <title>{title}</title>
  <id>https://localhost:8089/servicesNS/{owner}/{app}/saved/searches/{title}</id>
  <updated>2014-02-11T15:47:37-08:00</updated>
  <link href="/servicesNS/{owner}/{app}/saved/searches/{title}" rel="alternate"/>
  <link href="/servicesNS/{owner}/{app}/saved/searches/{title}/_reload" rel="_reload"/>
  <author><name>{owner}</name></author>
  <content type="text/xml">
    <s:dict>
      <s:key name="search">{search}</s:key>
      <s:key name="is_scheduled">1</s:key>
      <s:key name="dispatch.earliest_time">-1h</s:key>
      <s:key name="eai:acl">
        <s:dict>
          <s:key name="app">{app}</s:key>
          <s:key name="owner">{owner}</s:key>
          <s:key name="perms">
            <s:dict>
              <s:key name="read">
                <s:list>
                  <s:item>*</s:item>
                </s:list>
              </s:key>
            </s:dict>
          </s:key>
        </s:dict>
      </s:key>
    </s:dict>
  </content>
"""


def entry_xml(
    title: str = "Errors",
    owner: str = "nobody",
    app: str = "search",
    search: str = "index=main error",
) -> str:
    """Return a Splunk Atom <entry> document."""
    body = ENTRY_BODY.format(title=title, owner=owner, app=app, search=search)
    return (
        ATOM_HEADER
        + '<entry xmlns="http://www.w3.org/2005/Atom" '
        'xmlns:s="http://dev.splunk.com/ns/rest">'
        + body
        + "</entry>"
    )


def feed_xml(*entries: dict) -> str:
    """Return a Splunk Atom <feed> document with one entry per kwargs dict."""
    bodies = "".join(
        "<entry>"
        + ENTRY_BODY.format(
            **{
                "title": "Errors",
                "owner": "nobody",
                "app": "search",
                "search": "index=main error",
                **entry,
            }
        )
        + "</entry>"
        for entry in entries
    )
    return (
        ATOM_HEADER
        + '<feed xmlns="http://www.w3.org/2005/Atom" '
        'xmlns:s="http://dev.splunk.com/ns/rest" '
        'xmlns:opensearch="http://a9.com/-/spec/opensearch/1.1/">'
        "<title>savedsearches</title>"
        "<id>https://localhost:8089/servicesNS/nobody/search/saved/searches</id>"
        "<updated>2014-02-11T15:47:37-08:00</updated>"
        f"<opensearch:totalResults>{len(entries)}</opensearch:totalResults>"
        "<opensearch:itemsPerPage>30</opensearch:itemsPerPage>"
        "<opensearch:startIndex>0</opensearch:startIndex>"
        + bodies
        + "</feed>"
    )


def pytest_configure(config):
    # Register the asyncio marker so pytest doesn't warn when it's used.
    config.addinivalue_line(
        "markers", "asyncio: mark test to run in an asyncio event loop"
    )
    # Add custom markers for test organization
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )


@pytest.fixture(autouse=True)
def clear_splunk_env(monkeypatch):
    """Keep host SPLUNK_* variables out of Settings during tests."""
    for name in (
        "SPLUNK_HOST",
        "SPLUNK_PORT",
        "SPLUNK_SCHEME",
        "SPLUNK_USERNAME",
        "SPLUNK_PASSWORD",
        "SPLUNK_VERIFY_SSL",
        "SPLUNK_CONNECT_TIMEOUT",
        "SPLUNK_READ_TIMEOUT",
        "SPLUNK_LOG_LEVEL",
        "HTTP_ENABLE_HTTP2",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def mock_context():
    """Mock transport whose get_document is an AsyncMock."""
    context = MagicMock()
    context.get_document = AsyncMock()
    context.__str__.return_value = "https://localhost:8089"
    return context


@pytest.fixture
def make_entry():
    """Factory for Atom entry documents."""
    return entry_xml


@pytest.fixture
def make_feed():
    """Factory for Atom feed documents."""
    return feed_xml


# Rely on pytest-asyncio for async test handling; no custom hook needed.
