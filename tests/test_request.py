"""Tests for request descriptors and URL building."""

import dataclasses

import pytest

from cloudscore.request import RequestDescriptor, UrlBuilder, render_query_value


class TestUrlBuilder:
    """Tests for UrlBuilder."""

    def test_builds_path(self):
        url = UrlBuilder("/v2.6/gamer/scores/").path("private").path("arena")
        assert url.build_path() == "/v2.6/gamer/scores/private/arena"

    def test_segments_are_encoded(self):
        url = UrlBuilder("/v2.6/gamer/scores").path("private").path("boss rush/2")
        assert url.build_path() == "/v2.6/gamer/scores/private/boss%20rush%2F2"

    def test_query_values_rendered(self):
        url = UrlBuilder("/x").query_param("count", 10).query_param("mayvary", True)
        assert url.query == {"count": "10", "mayvary": "true"}

    def test_query_is_a_copy(self):
        url = UrlBuilder("/x").query_param("page", 1)
        url.query["page"] = "2"
        assert url.query == {"page": "1"}

    def test_descriptor(self):
        descriptor = (
            UrlBuilder("/v2.6/gamer/scores")
            .path("private")
            .path("arena")
            .query_param("order", "hightolow")
            .descriptor(method="POST", json_body={"score": 1})
        )
        assert descriptor.method == "POST"
        assert descriptor.path == "/v2.6/gamer/scores/private/arena"
        assert descriptor.query == {"order": "hightolow"}
        assert descriptor.json_body == {"score": 1}
        assert descriptor.prepared is False


class TestRenderQueryValue:
    @pytest.mark.parametrize(
        "value,expected",
        [(True, "true"), (False, "false"), (3, "3"), ("me", "me"), (2.5, "2.5")],
    )
    def test_render(self, value, expected):
        assert render_query_value(value) == expected


class TestRequestDescriptor:
    """Tests for RequestDescriptor."""

    def test_immutable(self):
        descriptor = RequestDescriptor(path="/v1/ping")
        with pytest.raises(dataclasses.FrozenInstanceError):
            descriptor.path = "/other"

    def test_with_headers_merges(self):
        descriptor = RequestDescriptor(path="/v1/ping", headers={"a": "1", "b": "2"})
        updated = descriptor.with_headers({"b": "3"})
        assert updated.headers == {"a": "1", "b": "3"}
        assert descriptor.headers == {"a": "1", "b": "2"}

    def test_describe(self):
        assert RequestDescriptor(path="/v1/ping").describe() == "GET /v1/ping"
        prepared = RequestDescriptor(path="/v1/ping", url="https://api.test/v1/ping")
        assert prepared.describe() == "GET https://api.test/v1/ping"

    def test_equality_ignores_hook(self):
        first = RequestDescriptor(path="/v1/ping", failure_hook=lambda f: f.abort())
        second = RequestDescriptor(path="/v1/ping")
        assert first == second

    @pytest.mark.parametrize("method,expected", [("GET", True), ("PUT", True), ("post", False), ("POST", False)])
    def test_idempotent(self, method, expected):
        assert RequestDescriptor(path="/x", method=method).idempotent is expected
