"""
Tests for cache key fingerprinting and distance helpers.
"""

import pytest

from neon_access.utils import build_cache_key, haversine_km


def test_key_without_params_is_operation_name():
    assert build_cache_key("list_releases") == "list_releases"
    assert build_cache_key("list_releases", {"release": None}) == "list_releases"


def test_key_ignores_parameter_order():
    a = build_cache_key("query_data", {"productCode": "DP1.00001.001", "siteCode": "SRER"})
    b = build_cache_key("query_data", {"siteCode": "SRER", "productCode": "DP1.00001.001"})
    assert a == b


def test_key_ignores_nested_parameter_order():
    a = build_cache_key("op", {"filter": {"a": 1, "b": 2}})
    b = build_cache_key("op", {"filter": {"b": 2, "a": 1}})
    assert a == b


def test_key_drops_none_values():
    assert build_cache_key("op", {"a": 1, "b": None}) == build_cache_key("op", {"a": 1})


def test_key_distinguishes_operations_and_values():
    base = build_cache_key("get_site", {"site": "SRER"})
    assert base != build_cache_key("get_product", {"site": "SRER"})
    assert base != build_cache_key("get_site", {"site": "HARV"})


def test_key_keeps_list_order():
    a = build_cache_key("op", {"siteCodes": ["SRER", "HARV"]})
    b = build_cache_key("op", {"siteCodes": ["HARV", "SRER"]})
    assert a != b


def test_key_format():
    key = build_cache_key("get_site", {"site": "SRER"})
    prefix, digest = key.split(":")
    assert prefix == "get_site"
    assert len(digest) == 64


def test_haversine_zero_distance():
    assert haversine_km(31.91, -110.83, 31.91, -110.83) == 0.0


def test_haversine_one_degree_of_latitude():
    assert haversine_km(0.0, 0.0, 1.0, 0.0) == pytest.approx(111.19, abs=0.01)


def test_haversine_is_symmetric():
    srer_to_harv = haversine_km(31.91, -110.83, 42.54, -72.17)
    harv_to_srer = haversine_km(42.54, -72.17, 31.91, -110.83)
    assert srer_to_harv == pytest.approx(harv_to_srer)
