"""String helpers for tool-calling hosts."""
import functools

from searchy import cli, helpers

from fixtures.fake_session import FakeSession, session_factory


def use_session(monkeypatch, session):
    monkeypatch.setattr(helpers, "run", functools.partial(cli.run, session_factory=session_factory(session)))


def test_search_google_returns_urls(monkeypatch):
    session = FakeSession(result_pages=[{"div#search a[href]": ["https://a.example", "https://b.example"]}])
    use_session(monkeypatch, session)
    assert helpers.search_google("test").splitlines() == ["https://a.example", "https://b.example"]


def test_search_bing_uses_bing(monkeypatch):
    session = FakeSession(result_pages=[{"li.b_algo a[href]": ["https://www.bing.com/x"]}])
    use_session(monkeypatch, session)
    assert helpers.search_bing("test").strip() == "https://www.bing.com/x"
    assert session.navigations == ["https://www.bing.com/search?q=test"]


def test_download_and_strip_html(monkeypatch):
    session = FakeSession(contents={"https://a.example": ["<p>Hello &amp; bye</p>"]})
    use_session(monkeypatch, session)
    assert helpers.download_and_strip_html("https://a.example").strip() == "Hello & bye"


def test_errors_come_back_as_text(monkeypatch):
    def explode(argv, out=None):
        raise RuntimeError("browser missing")

    monkeypatch.setattr(helpers, "run", explode)
    assert helpers.search_google("x") == "Error: browser missing"


def test_invalid_url_is_reported_in_output(monkeypatch):
    use_session(monkeypatch, FakeSession())
    assert helpers.download_and_strip_html("not a url").strip() == "Invalid URL: not a url"


def test_every_failing_call_reports_its_error_block(monkeypatch):
    session = FakeSession(navigation_errors={"https://a.example": RuntimeError("boom")})
    use_session(monkeypatch, session)

    for _ in range(2):
        output = helpers.download_and_strip_html("https://a.example")
        assert "Error fetching content from https://a.example: boom" in output
        assert "\nError: " in output
        assert "Failed to fetch https://a.example: boom" in output


def test_queries_starting_with_a_dash_are_searched(monkeypatch):
    session = FakeSession(result_pages=[{"div#search a[href]": ["https://a.example"]}])
    use_session(monkeypatch, session)
    assert helpers.search_google("-python").strip() == "https://a.example"
    assert session.navigations == ["https://www.google.com/search?q=-python"]


def test_usage_errors_come_back_as_text():
    output = helpers._execute(["search", "--max", "0", "x"])
    assert output.startswith("\nError: ")
    assert "--max must be a positive integer" in output
