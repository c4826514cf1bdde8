"""Tests for SPListConfigurationProvider."""

from __future__ import annotations

import pytest

from sprest.cache import ConfigurationCache
from sprest.configuration import CachingConfigurationProvider, SPListConfigurationProvider
from sprest.exceptions import ConfigurationLoadError, MalformedResponseError, ServerError
from sprest.rest import SPRest


SITE = "https://contoso.sharepoint.com/sites/dev"
ROWS = [{"Title": "A", "Value": "1"}, {"Title": "B", "Value": "2"}]


@pytest.fixture
def web(transport):
    return SPRest(transport, base_url=SITE).web


class TestGetConfiguration:
    def test_reads_title_value_rows(self, web, transport) -> None:
        transport.queue({"value": ROWS})
        assert SPListConfigurationProvider(web).get_configuration() == {"A": "1", "B": "2"}
        assert transport.last.method == "GET"
        assert transport.last.url == (
            SITE + "/_api/web/lists/getByTitle('config')/items?$select=Title,Value"
        )

    def test_custom_list_title(self, web, transport) -> None:
        transport.queue({"value": []})
        provider = SPListConfigurationProvider(web, "AppSettings")
        assert provider.get_configuration() == {}
        assert "getByTitle('AppSettings')" in transport.last.url
        assert provider.list_title == "AppSettings"
        assert provider.web is web

    def test_accepts_verbose_envelope(self, web, transport) -> None:
        transport.queue({"d": {"results": ROWS}})
        assert SPListConfigurationProvider(web).get_configuration() == {"A": "1", "B": "2"}

    def test_accepts_bare_array(self, web, transport) -> None:
        transport.queue(ROWS)
        assert SPListConfigurationProvider(web).get_configuration() == {"A": "1", "B": "2"}

    def test_ignores_extra_columns_and_metadata(self, web, transport) -> None:
        rows = [{"__metadata": {"type": "SP.Data.ConfigListItem"}, "Title": "A", "Value": "1", "Id": 4}]
        transport.queue({"d": {"results": rows}})
        assert SPListConfigurationProvider(web).get_configuration() == {"A": "1"}

    def test_empty_or_numeric_value(self, web, transport) -> None:
        transport.queue({"value": [{"Title": "A", "Value": None}, {"Title": "B", "Value": 3}]})
        assert SPListConfigurationProvider(web).get_configuration() == {"A": "", "B": "3"}

    def test_missing_title_is_rejected(self, web, transport) -> None:
        transport.queue({"value": [{"Title": "A", "Value": "1"}, {"Value": "orphan"}]})
        with pytest.raises(MalformedResponseError):
            SPListConfigurationProvider(web).get_configuration()

    def test_empty_title_is_rejected(self, web, transport) -> None:
        transport.queue({"value": [{"Title": "", "Value": "1"}]})
        with pytest.raises(MalformedResponseError):
            SPListConfigurationProvider(web).get_configuration()

    def test_non_array_payload_is_rejected(self, web, transport) -> None:
        transport.queue({"d": {"Title": "not rows"}})
        with pytest.raises(MalformedResponseError):
            SPListConfigurationProvider(web).get_configuration()

    def test_request_error_is_wrapped(self, web, transport) -> None:
        transport.queue(text="boom", status_code=500)
        with pytest.raises(ConfigurationLoadError) as exc_info:
            SPListConfigurationProvider(web).get_configuration()
        cause = exc_info.value.__cause__
        assert isinstance(cause, ServerError)
        assert cause.status_code == 500
        assert cause.body == "boom"


class TestAsCaching:
    def test_cache_key_combines_web_and_list(self, web) -> None:
        caching = SPListConfigurationProvider(web, "config").as_caching()
        assert isinstance(caching, CachingConfigurationProvider)
        assert caching.cache_key == f"splist_{SITE}/_api/web+config"

    def test_equivalent_providers_share_cache(self, transport) -> None:
        cache = ConfigurationCache(clock=lambda: 0.0, ttl_seconds=60)
        transport.queue({"value": ROWS})

        first = SPListConfigurationProvider(SPRest(transport, base_url=SITE).web).as_caching(cache=cache)
        second = SPListConfigurationProvider(SPRest(transport, base_url=SITE).web).as_caching(cache=cache)

        assert first.get_configuration() == {"A": "1", "B": "2"}
        assert second.get_configuration() == {"A": "1", "B": "2"}
        assert len(transport.calls) == 1

    def test_ttl_is_forwarded(self, web, transport) -> None:
        now = [0.0]
        cache = ConfigurationCache(clock=lambda: now[0], ttl_seconds=300)
        transport.queue({"value": ROWS})
        transport.queue({"value": [{"Title": "A", "Value": "changed"}]})

        provider = SPListConfigurationProvider(web).as_caching(ttl_seconds=10, cache=cache)
        provider.get_configuration()
        now[0] = 10.0
        assert provider.get_configuration() == {"A": "changed"}
        assert len(transport.calls) == 2
