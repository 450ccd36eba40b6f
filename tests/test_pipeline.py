import requests

from leadfinder import pipeline
from leadfinder.discovery import LEGACY_TEXT_URL, PLACES_TEXT_URL, ChainResult
from leadfinder.exceptions import ProviderError
from leadfinder.linkedin import ROLES
from leadfinder.settings import Settings
from leadfinder.types import Candidate, Mode, SearchCriteria

KEYLESS = Settings(places_api_key=None)
KEYED = Settings(places_api_key="test-key")
OSM = KEYLESS.overpass_url


class FakeChain:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.queries = []

    def resolve(self, query, criteria):
        self.queries.append(query)
        if self.error:
            raise self.error
        return self.result


def _no_emails(monkeypatch):
    monkeypatch.setattr(pipeline, "discover_emails", lambda website, **kw: [])


def test_widgets_in_sydney_scores_100(monkeypatch, dummy_session, dummy_response):
    _no_emails(monkeypatch)
    session = dummy_session(
        {
            OSM: dummy_response(
                payload={"elements": [{"tags": {"name": "Acme Widgets", "addr:city": "Sydney"}}]}
            )
        }
    )
    criteria = SearchCriteria(subject="widgets", industry="", location="Sydney", result_limit=15)
    env = pipeline.EnrichmentPipeline(KEYLESS, session=session).run(criteria)

    assert env.mode == Mode.LIVE_OSM
    assert env.query_used == "widgets in Sydney"
    assert env.total == 1
    [company] = env.companies
    assert company.name == "Acme Widgets"
    assert company.lead_score == 100
    assert company.description == "widgets"
    assert [l.role for l in company.linkedin_search] == ROLES


def test_keyed_providers_failing_still_serves_osm(monkeypatch, dummy_session, dummy_response):
    _no_emails(monkeypatch)
    session = dummy_session(
        {
            PLACES_TEXT_URL: requests.ConnectionError("reset"),
            LEGACY_TEXT_URL: dummy_response(payload={"status": "REQUEST_DENIED"}),
            OSM: dummy_response(payload={"elements": [{"tags": {"name": "Gamma Works"}}]}),
        }
    )
    env = pipeline.EnrichmentPipeline(KEYED, session=session).run(SearchCriteria())
    assert env.mode == Mode.LIVE_OSM
    assert env.error_message is None
    assert [c.name for c in env.companies] == ["Gamma Works"]


def test_total_failure_returns_placeholders(monkeypatch, dummy_session, dummy_response):
    _no_emails(monkeypatch)
    session = dummy_session(
        {
            PLACES_TEXT_URL: dummy_response(status_code=500, text="oops"),
            LEGACY_TEXT_URL: requests.Timeout("slow"),
            OSM: dummy_response(status_code=504, text="gateway timeout"),
        }
    )
    criteria = SearchCriteria(subject="AI", location="Sydney")
    env = pipeline.EnrichmentPipeline(KEYED, session=session).run(criteria)

    assert env.mode == Mode.MOCK_ERROR
    assert env.total == 2
    assert len(env.companies) == 2
    assert env.error_message and "OSM 504" in env.error_message
    assert env.query_used == "AI in Sydney"
    for c in env.companies:
        assert c.emails == ()
        assert [l.role for l in c.linkedin_search] == ["CEO"]
        assert 10 <= c.lead_score <= 100
    assert {c.name for c in env.companies} == {"AI Logistics Pty Ltd", "Smart Manufacturing AI"}


def test_empty_osm_result_is_not_an_error(monkeypatch, dummy_session, dummy_response):
    _no_emails(monkeypatch)
    session = dummy_session({OSM: dummy_response(payload={"elements": []})})
    env = pipeline.EnrichmentPipeline(KEYLESS, session=session).run(SearchCriteria(subject="unobtainium"))
    assert env.mode == Mode.LIVE_OSM
    assert env.total == 0
    assert env.companies == []
    assert env.error_message is None


def test_result_limit_bounds_enrichment(monkeypatch):
    visited = []
    monkeypatch.setattr(pipeline, "discover_emails", lambda website, **kw: visited.append(website) or [])
    candidates = [Candidate(name=f"Co {i}", website=f"https://co{i}.com") for i in range(8)]
    chain = FakeChain(ChainResult(mode=Mode.LIVE_V1, candidates=candidates))

    env = pipeline.EnrichmentPipeline(KEYED, chain=chain).run(SearchCriteria(result_limit=3))
    assert env.total == 8
    assert len(env.companies) == 3
    assert visited == ["https://co0.com", "https://co1.com", "https://co2.com"]


def test_companies_ranked_by_score_stable(monkeypatch):
    _no_emails(monkeypatch)
    candidates = [
        Candidate(name="Plain One", address="Perth"),
        Candidate(name="Widget Two", address="Sydney"),
        Candidate(name="Plain Three", address="Sydney"),
        Candidate(name="Widget Four", address="Perth"),
    ]
    chain = FakeChain(ChainResult(mode=Mode.LIVE_OSM, candidates=candidates))
    criteria = SearchCriteria(subject="widget", location="sydney")
    env = pipeline.EnrichmentPipeline(KEYLESS, chain=chain).run(criteria)
    assert [(c.name, c.lead_score) for c in env.companies] == [
        ("Widget Two", 100),
        ("Widget Four", 80),
        ("Plain Three", 50),
        ("Plain One", 30),
    ]


def test_query_used_matches_provider_query(monkeypatch):
    _no_emails(monkeypatch)
    chain = FakeChain(ChainResult(mode=Mode.LIVE_OSM, candidates=[]))
    env = pipeline.EnrichmentPipeline(KEYLESS, chain=chain).run(SearchCriteria())
    assert chain.queries == ["manufacturer"]
    assert env.query_used == "manufacturer"


def test_enrichment_error_falls_back_to_placeholders(monkeypatch):
    def boom(website, **kw):
        raise RuntimeError("parser exploded")

    monkeypatch.setattr(pipeline, "discover_emails", boom)
    chain = FakeChain(ChainResult(mode=Mode.LIVE_V1, candidates=[Candidate(name="Acme", website="acme.com")]))
    env = pipeline.EnrichmentPipeline(KEYED, chain=chain).run(SearchCriteria())
    assert env.mode == Mode.MOCK_ERROR
    assert env.error_message == "parser exploded"


def test_error_without_message_still_reports_something():
    chain = FakeChain(error=ProviderError("overpass", ""))
    env = pipeline.EnrichmentPipeline(KEYLESS, chain=chain).run(SearchCriteria())
    assert env.mode == Mode.MOCK_ERROR
    assert env.error_message == "ProviderError"


def test_emails_are_attached(monkeypatch):
    monkeypatch.setattr(pipeline, "discover_emails", lambda website, **kw: ["info@acme.com"])
    chain = FakeChain(ChainResult(mode=Mode.LIVE_V1, candidates=[Candidate(name="Acme", website="acme.com")]))
    env = pipeline.EnrichmentPipeline(KEYED, chain=chain).run(SearchCriteria())
    assert env.companies[0].emails == ("info@acme.com",)


def test_envelope_to_dict_shape(monkeypatch):
    _no_emails(monkeypatch)
    chain = FakeChain(ChainResult(mode=Mode.LIVE_V1, candidates=[Candidate(name="Acme", website="https://acme.com")]))
    payload = pipeline.EnrichmentPipeline(KEYED, chain=chain).run(SearchCriteria(subject="acme")).to_dict()
    assert set(payload) == {"mode", "queryUsed", "total", "companies"}
    company = payload["companies"][0]
    assert set(company) == {"name", "website", "address", "description", "emails", "linkedinSearch", "leadScore"}
    assert company["leadScore"] == 100
    assert len(company["linkedinSearch"]) == 7


def test_search_companies_uses_given_settings(monkeypatch):
    seen = {}

    class Recorder(pipeline.EnrichmentPipeline):
        def run(self, criteria):
            seen["settings"] = self.settings
            return "ok"

    monkeypatch.setattr(pipeline, "EnrichmentPipeline", Recorder)
    assert pipeline.search_companies(SearchCriteria(), KEYLESS) == "ok"
    assert seen["settings"] is KEYLESS


def test_search_companies_closes_its_session(monkeypatch, dummy_session, dummy_response):
    created = []

    class ClosingSession(dummy_session):
        closed = False

        def __init__(self):
            super().__init__({OSM: dummy_response(payload={"elements": []})})
            created.append(self)

        def close(self):
            self.closed = True

    monkeypatch.setattr(requests, "Session", ClosingSession)
    env = pipeline.search_companies(SearchCriteria(), KEYLESS)
    assert env.mode == Mode.LIVE_OSM
    assert len(created) == 1
    assert created[0].closed


def test_pipeline_leaves_a_caller_session_open(dummy_session):
    class TrackedSession(dummy_session):
        closed = False

        def close(self):
            self.closed = True

    session = TrackedSession()
    chain = FakeChain(result=ChainResult(mode=Mode.LIVE_OSM, candidates=[]))
    with pipeline.EnrichmentPipeline(KEYLESS, chain=chain, session=session) as p:
        p.run(SearchCriteria())
    assert not session.closed
