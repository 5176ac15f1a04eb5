import pytest

from shair.local.mdns import MDNS_SERVICE, BrowseEntry, build_response, parse_response


def test_round_trip():
    data = build_response("alice", MDNS_SERVICE, 8085, ["192.0.2.10"], 120)
    assert parse_response(data, MDNS_SERVICE) == [
        BrowseEntry("alice", MDNS_SERVICE, 8085, ("192.0.2.10",), 120)
    ]


def test_goodbye_has_zero_ttl():
    data = build_response("alice", MDNS_SERVICE, 8085, ["192.0.2.10"], 0)
    (entry,) = parse_response(data, MDNS_SERVICE)
    assert entry.ttl == 0


def test_name_with_spaces_and_dots():
    data = build_response("My Laptop.home", MDNS_SERVICE, 9000, ["192.0.2.1"], 60)
    (entry,) = parse_response(data, MDNS_SERVICE)
    assert entry.name == "My Laptop.home"
    assert entry.port == 9000


def test_other_service_ignored():
    data = build_response("bob", "_other._tcp", 1234, ["192.0.2.2"], 60)
    assert parse_response(data, MDNS_SERVICE) == []


def test_malformed_packet():
    with pytest.raises(ValueError):
        parse_response(b"\x01\x02\x03", MDNS_SERVICE)


def test_empty_name_rejected():
    with pytest.raises(ValueError):
        build_response("", MDNS_SERVICE, 1, [], 1)