import dataclasses

import pytest

from promised_http import HttpMethod, RequestSpec


def test_defaults_to_get_without_body_or_headers() -> None:
    spec = RequestSpec("https://api.test/user/1")
    assert spec.method is HttpMethod.GET
    assert spec.body is None
    assert not spec.has_body
    assert dict(spec.headers) == {}


@pytest.mark.parametrize("method", ["get", "Post", "PUT", "delete", HttpMethod.PUT])
def test_method_is_normalised(method) -> None:
    spec = RequestSpec("https://api.test", method)
    assert isinstance(spec.method, HttpMethod)
    assert spec.method.value == str(getattr(method, "value", method)).upper()


@pytest.mark.parametrize("method", ["PATCH", "HEAD", "", None])
def test_unsupported_method_is_rejected(method) -> None:
    with pytest.raises(ValueError):
        RequestSpec("https://api.test", method)


def test_descriptor_is_immutable() -> None:
    headers = {"Authorization": "Bearer t"}
    spec = RequestSpec.get("https://api.test", headers=headers)
    headers["Authorization"] = "changed"
    assert spec.headers["Authorization"] == "Bearer t"
    with pytest.raises(TypeError):
        spec.headers["X-New"] = "1"  # type: ignore[index]
    with pytest.raises(dataclasses.FrozenInstanceError):
        spec.url = "https://other.test"  # type: ignore[misc]


def test_with_headers_returns_merged_copy() -> None:
    spec = RequestSpec.post("https://api.test", {"a": 1}, headers={"A": "1", "B": "2"})
    merged = spec.with_headers({"B": "3", "C": "4"})
    assert dict(merged.headers) == {"A": "1", "B": "3", "C": "4"}
    assert dict(spec.headers) == {"A": "1", "B": "2"}
    assert merged.body == {"a": 1}


@pytest.mark.parametrize(
    ("base", "url", "expected"),
    [
        ("https://api.test", "/user/1", "https://api.test/user/1"),
        ("https://api.test/v1/", "user/1", "https://api.test/v1/user/1"),
        ("https://api.test/v1", "/user/1", "https://api.test/v1/user/1"),
        ("https://api.test/v1", "https://other.test/x", "https://other.test/x"),
        (None, "/user/1", "/user/1"),
    ],
)
def test_resolve_against_base(base, url, expected) -> None:
    assert RequestSpec.get(url).resolve(base).url == expected
