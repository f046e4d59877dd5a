"""Tests for the attribute normalizers and scalar parsers."""

import ipaddress
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from errors import EndOfRib, SemanticError, SemanticErrorKind
from models import AsSet, Community, Origin
from normalizers import (
    END_OF_RIB_PREFIX,
    normalize_aggregator,
    normalize_as_path,
    normalize_communities,
    normalize_origin,
    parse_asn,
    parse_ip,
    parse_prefix,
)


class TestAsPath:
    def test_plain_hops(self):
        path = normalize_as_path([58299, 49981, 397666])
        assert path.segments == (58299, 49981, 397666)

    def test_set_segment_keeps_display_order(self):
        path = normalize_as_path([58299, [397666, 49981]])
        assert path.segments[1].asns == (397666, 49981)
        assert str(path) == "58299 {397666,49981}"

    def test_set_segment_equality_ignores_order(self):
        assert normalize_as_path([1, [2, 3]]) == normalize_as_path([1, [3, 2]])
        assert normalize_as_path([1, [2, 3]]) != normalize_as_path([[2, 3], 1])

    def test_empty_path(self):
        path = normalize_as_path([])
        assert path.segments == ()
        assert path.origin_asns == []

    def test_origin_asns_from_set(self):
        path = normalize_as_path([1299, [3356, 13904]])
        assert sorted(path.origin_asns) == [3356, 13904]

    def test_contains(self):
        path = normalize_as_path([1299, [3356, 13904]])
        assert path.contains(1299)
        assert path.contains(13904)
        assert not path.contains(174)


class TestCommunities:
    def test_pairs(self):
        assert normalize_communities([[1299, 20000], [199524, 100]]) == (
            Community(asn=1299, value=20000),
            Community(asn=199524, value=100),
        )

    def test_empty(self):
        assert normalize_communities([]) == ()

    def test_display(self):
        assert [str(c) for c in normalize_communities([[1299, 20000]])] == ["1299:20000"]

    @pytest.mark.parametrize("pair", [[], [1299], [1299, 1, 2]])
    def test_wrong_arity(self, pair):
        with pytest.raises(SemanticError) as exc:
            normalize_communities([[1, 1], pair])
        assert exc.value.kind == SemanticErrorKind.INCORRECT_COMMUNITY


class TestOrigin:
    @pytest.mark.parametrize("token,expected", [
        ("igp", Origin.IGP),
        ("IGP", Origin.IGP),
        ("Egp", Origin.EGP),
        ("incomplete", Origin.INCOMPLETE),
        ("INCOMPLETE", Origin.INCOMPLETE),
    ])
    def test_tokens(self, token, expected):
        assert normalize_origin(token) == expected

    @pytest.mark.parametrize("token", ["?", "", "i", "igp "])
    def test_unknown(self, token):
        with pytest.raises(SemanticError) as exc:
            normalize_origin(token)
        assert exc.value.kind == SemanticErrorKind.UNKNOWN_ORIGIN
        assert exc.value.offending_value == token


class TestAggregator:
    def test_asn_and_ip(self):
        asn, ip = normalize_aggregator("65000:8.42.232.1")
        assert asn == 65000
        assert ip == ipaddress.ip_address("8.42.232.1")

    @pytest.mark.parametrize("raw", [
        "garbage",
        "65000",
        "65000:8.42.232.1:1",
        "65000:2001:db8::1",
        "AS65000:8.42.232.1",
        "65000:8.42.232",
        ":8.42.232.1",
        "4294967296:8.42.232.1",
    ])
    def test_malformed(self, raw):
        with pytest.raises(SemanticError) as exc:
            normalize_aggregator(raw)
        assert exc.value.kind == SemanticErrorKind.INCORRECT_AGGREGATOR
        assert exc.value.offending_value == raw


class TestScalars:
    def test_parse_asn(self):
        assert parse_asn("58299") == 58299
        assert parse_asn("4294967295") == 4294967295

    @pytest.mark.parametrize("text", ["", "-1", "+1", " 1", "1_000", "not-a-number", "4294967296"])
    def test_parse_asn_rejects(self, text):
        with pytest.raises(ValueError):
            parse_asn(text)

    def test_parse_ip(self):
        assert parse_ip("2001:7f8:24::82") == ipaddress.ip_address("2001:7f8:24::82")
        with pytest.raises(ValueError):
            parse_ip("rrc21")

    def test_parse_ip_rejects_zone_id(self):
        with pytest.raises(ValueError):
            parse_ip("fe80::1%eth0")

    def test_aggregator_with_zone_id(self):
        with pytest.raises(SemanticError) as exc:
            normalize_aggregator("65000:fe80::1%eth0")
        assert exc.value.kind == SemanticErrorKind.INCORRECT_AGGREGATOR

    def test_parse_prefix(self):
        assert parse_prefix("64.68.236.0/22") == ipaddress.ip_network("64.68.236.0/22")
        assert parse_prefix("2602:fd9e:f00::/40") == ipaddress.ip_network("2602:fd9e:f00::/40")

    def test_parse_prefix_masks_host_bits(self):
        assert parse_prefix("10.0.0.1/24") == ipaddress.ip_network("10.0.0.0/24")

    def test_end_of_rib(self):
        with pytest.raises(EndOfRib):
            parse_prefix(END_OF_RIB_PREFIX)

    @pytest.mark.parametrize("literal", ["EOR", "10.0.0.0", "10.0.0.0/33", "/24", "prefix"])
    def test_parse_prefix_rejects(self, literal):
        with pytest.raises(SemanticError) as exc:
            parse_prefix(literal)
        assert exc.value.kind == SemanticErrorKind.INCORRECT_PREFIX


class TestAsSet:
    def test_hash_ignores_order(self):
        assert hash(AsSet(asns=(1, 2))) == hash(AsSet(asns=(2, 1)))
        assert len({AsSet(asns=(1, 2)), AsSet(asns=(2, 1))}) == 1

    def test_membership(self):
        assert 2 in AsSet(asns=(1, 2))
        assert 3 not in AsSet(asns=(1, 2))
