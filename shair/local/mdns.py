"""Advertise and browse the transfer service over multicast DNS."""

from __future__ import annotations

import logging
import select
import socket
import struct
import threading
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass

import dns.exception
import dns.flags
import dns.message
import dns.name
import dns.rdata
import dns.rdataclass
import dns.rdatatype
import dns.rrset

MDNS_SERVICE = "_shair._tcp"
MDNS_GROUP = "224.0.0.251"
MDNS_PORT = 5353
DEFAULT_TTL = 120
QUERY_INTERVAL = 10.0
_POLL = 0.5

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class BrowseEntry:
    """A service instance seen on the network. A ttl of 0 means it left."""

    name: str
    service: str
    port: int
    ips: tuple[str, ...]
    ttl: int


def _service_name(service: str) -> dns.name.Name:
    text = service if service.endswith(".") else f"{service}.local."
    return dns.name.from_text(text)


def _label(text: str) -> bytes:
    raw = text.encode("utf-8")
    if not raw or len(raw) > 63:
        raise ValueError(f"invalid DNS label: {text!r}")
    return raw


def build_response(
    name: str,
    service: str,
    port: int,
    addresses: Iterable[str],
    ttl: int = DEFAULT_TTL,
) -> bytes:
    """Encode an mDNS response announcing ``name`` on ``service``."""
    service_name = _service_name(service)
    instance = dns.name.Name((_label(name),)) + service_name
    host = dns.name.Name((_label(name),)) + dns.name.from_text("local.")
    IN = dns.rdataclass.IN

    msg = dns.message.Message(id=0)
    msg.flags = dns.flags.QR | dns.flags.AA
    ptr = dns.rdata.from_text(IN, dns.rdatatype.PTR, instance.to_text())
    msg.answer.append(dns.rrset.from_rdata(service_name, ttl, ptr))
    srv = dns.rdata.from_text(IN, dns.rdatatype.SRV, f"0 0 {port} {host.to_text()}")
    msg.additional.append(dns.rrset.from_rdata(instance, ttl, srv))
    txt = dns.rdata.from_text(IN, dns.rdatatype.TXT, '""')
    msg.additional.append(dns.rrset.from_rdata(instance, ttl, txt))
    for addr in addresses:
        rdtype = dns.rdatatype.AAAA if ":" in addr else dns.rdatatype.A
        rd = dns.rdata.from_text(IN, rdtype, addr)
        msg.additional.append(dns.rrset.from_rdata(host, ttl, rd))
    return msg.to_wire()


def parse_response(data: bytes, service: str) -> list[BrowseEntry]:
    """Extract the instances of ``service`` from an mDNS response."""
    try:
        msg = dns.message.from_wire(data)
    except dns.exception.DNSException as exc:
        raise ValueError(f"malformed mDNS packet: {exc}") from exc
    if not msg.flags & dns.flags.QR:
        return []
    service_name = _service_name(service)
    records = list(msg.answer) + list(msg.additional)

    ptrs: list[tuple[dns.name.Name, int]] = []
    srvs: dict[dns.name.Name, tuple[int, dns.name.Name]] = {}
    addrs: dict[dns.name.Name, list[str]] = {}
    for rrset in records:
        for rd in rrset:
            if rrset.rdtype == dns.rdatatype.PTR and rrset.name == service_name:
                ptrs.append((rd.target, rrset.ttl))
            elif rrset.rdtype == dns.rdatatype.SRV:
                srvs[rrset.name] = (rd.port, rd.target)
            elif rrset.rdtype in (dns.rdatatype.A, dns.rdatatype.AAAA):
                addrs.setdefault(rrset.name, []).append(rd.address)

    entries = []
    for target, ttl in ptrs:
        if target.parent() != service_name:
            continue
        port, host = srvs.get(target, (0, None))
        ips = tuple(addrs.get(host, ())) if host is not None else ()
        entries.append(
            BrowseEntry(
                name=target.labels[0].decode("utf-8", "replace"),
                service=service,
                port=port,
                ips=ips,
                ttl=ttl,
            )
        )
    return entries


def _local_address() -> str:
    probe = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        probe.connect((MDNS_GROUP, MDNS_PORT))
        return probe.getsockname()[0]
    except OSError:
        return "127.0.0.1"
    finally:
        probe.close()


def _multicast_socket() -> socket.socket:
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    if hasattr(socket, "SO_REUSEPORT"):
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEPORT, 1)
        except OSError:
            pass
    sock.bind(("", MDNS_PORT))
    mreq = struct.pack("4s4s", socket.inet_aton(MDNS_GROUP), socket.inet_aton("0.0.0.0"))
    sock.setsockopt(socket.IPPROTO_IP, socket.IP_ADD_MEMBERSHIP, mreq)
    sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, 255)
    return sock


def _is_query_for(data: bytes, service_name: dns.name.Name) -> bool:
    try:
        msg = dns.message.from_wire(data)
    except dns.exception.DNSException:
        return False
    if msg.flags & dns.flags.QR:
        return False
    return any(
        q.name == service_name and q.rdtype in (dns.rdatatype.PTR, dns.rdatatype.ANY)
        for q in msg.question
    )


def announce_service(name: str, port: int, cancel: threading.Event) -> None:
    """Answer queries for the service with ``name`` and ``port`` until cancelled."""
    service_name = _service_name(MDNS_SERVICE)
    addresses = [_local_address()]
    packet = build_response(name, MDNS_SERVICE, port, addresses)
    destination = (MDNS_GROUP, MDNS_PORT)
    with _multicast_socket() as sock:
        sock.sendto(packet, destination)
        while not cancel.is_set():
            ready, _, _ = select.select([sock], [], [], _POLL)
            if not ready:
                continue
            try:
                data, _ = sock.recvfrom(9000)
            except OSError:
                continue
            if _is_query_for(data, service_name):
                sock.sendto(packet, destination)
        goodbye = build_response(name, MDNS_SERVICE, port, addresses, ttl=0)
        try:
            sock.sendto(goodbye, destination)
        except OSError:
            _log.debug("could not send goodbye packet")


def browse(
    service: str,
    on_add: Callable[[BrowseEntry], None],
    on_remove: Callable[[BrowseEntry], None],
    cancel: threading.Event,
) -> None:
    """Call ``on_add``/``on_remove`` as instances of ``service`` come and go."""
    query = dns.message.make_query(_service_name(service), dns.rdatatype.PTR)
    query.id = 0
    query.flags = 0
    wire = query.to_wire()
    known: dict[str, tuple[BrowseEntry, float]] = {}
    next_query = 0.0
    with _multicast_socket() as sock:
        while not cancel.is_set():
            now = time.monotonic()
            if now >= next_query:
                try:
                    sock.sendto(wire, (MDNS_GROUP, MDNS_PORT))
                except OSError:
                    _log.debug("mDNS query failed")
                next_query = now + QUERY_INTERVAL
            for key, (entry, expiry) in list(known.items()):
                if expiry <= now:
                    del known[key]
                    on_remove(entry)
            ready, _, _ = select.select([sock], [], [], _POLL)
            if not ready:
                continue
            try:
                data, _ = sock.recvfrom(9000)
                entries = parse_response(data, service)
            except (OSError, ValueError):
                continue
            for entry in entries:
                if entry.ttl == 0:
                    previous = known.pop(entry.name, None)
                    if previous is not None:
                        on_remove(previous[0])
                elif entry.ips:
                    expiry = time.monotonic() + entry.ttl
                    if entry.name not in known:
                        known[entry.name] = (entry, expiry)
                        on_add(entry)
                    else:
                        known[entry.name] = (known[entry.name][0], expiry)