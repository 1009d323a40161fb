import pytest

from stratflow.palettes import (
    DEFAULT_SCHEME,
    SCHEMES,
    complementary,
    create_custom_scheme,
    get_scheme,
    list_schemes,
)


def test_default_scheme_exists():
    assert DEFAULT_SCHEME in SCHEMES
    assert get_scheme(DEFAULT_SCHEME) is SCHEMES[DEFAULT_SCHEME]


def test_list_schemes_sorted():
    names = list_schemes()
    assert names == sorted(SCHEMES)


def test_unknown_scheme():
    with pytest.raises(KeyError):
        get_scheme("plaid")


def test_complementary():
    assert complementary((255, 0, 0)) == (0, 255, 255)


def test_custom_scheme_uses_complementary_lower():
    scheme = create_custom_scheme("Custom", (255, 0, 0))
    assert scheme.upper == (255, 0, 0)
    assert scheme.lower == (0, 255, 255)
    assert all(c < 30 for c in scheme.bg)
