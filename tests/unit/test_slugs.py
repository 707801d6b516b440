import pytest

from storefront.domain.slugs import (
    generate_slug,
    generate_unique_slug,
    is_valid_slug,
    normalize_slug,
)


@pytest.mark.parametrize(
    "title, expected",
    [
        ("Hello World", "hello-world"),
        ("  Hello,   World!!  ", "hello-world"),
        ("Café Crème", "cafe-creme"),
        ("CO₂ Laser™ Pro", "co2-laser-pro"),
        ("Area m² guide", "area-m2-guide"),
        ("Before – after — done", "before-after-done"),
        ("“Quoted” ‘title’", "quoted-title"),
        ("---", ""),
        ("", ""),
        (None, ""),
    ],
)
def test_generate_slug(title, expected):
    assert generate_slug(title) == expected


def test_generate_slug_truncates_without_trailing_hyphen():
    slug = generate_slug("abc def ghi", max_length=4)
    assert slug == "abc"
    assert len(generate_slug("word " * 100)) <= 120


@pytest.mark.parametrize(
    "raw", ["co₂-laser", "Hello World", "already-ok", "Ünïcödé--slug--", "a__b", "-x-"]
)
def test_normalize_slug_is_idempotent(raw):
    once = normalize_slug(raw)
    assert normalize_slug(once) == once
    assert once == "" or is_valid_slug(once)


def test_normalize_slug_maps_subscript_digits():
    assert normalize_slug("co₂-laser") == "co2-laser"


def test_is_valid_slug():
    assert is_valid_slug("hello-world-2")
    assert not is_valid_slug("Hello")
    assert not is_valid_slug("hello--world")
    assert not is_valid_slug("-hello")
    assert not is_valid_slug("")
    assert not is_valid_slug(None)


def test_generate_unique_slug_returns_base_when_free():
    assert generate_unique_slug("hello-world", lambda s: False) == "hello-world"


def test_generate_unique_slug_suffixes_until_free():
    taken = {"hello-world", "hello-world-2", "hello-world-3"}
    assert generate_unique_slug("hello-world", taken.__contains__) == "hello-world-4"


def test_generate_unique_slug_result_is_never_taken():
    taken: set[str] = set()
    for _ in range(25):
        slug = generate_unique_slug("post", taken.__contains__)
        assert slug not in taken
        taken.add(slug)
    assert len(taken) == 25
