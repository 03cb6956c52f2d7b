"""Tests for tunnel port derivation."""

from __future__ import annotations

from pgprovider.ports import DEFAULT_PORT_ALLOCATOR, MAX_TUNNEL_PORT, MIN_TUNNEL_PORT, TunnelPortAllocator


def test_ports_fall_in_registered_range() -> None:
    allocator = TunnelPortAllocator()

    for host in ("db.internal", "localhost", "10.0.0.5", ""):
        for port in (1, 5432, 6432, 65535):
            assert MIN_TUNNEL_PORT <= allocator.port_for(host, port) <= MAX_TUNNEL_PORT


def test_same_address_maps_to_same_port() -> None:
    allocator = TunnelPortAllocator()

    assert allocator.port_for("db.internal", 5432) == allocator.port_for("db.internal", 5432)
    assert DEFAULT_PORT_ALLOCATOR.port_for("replica", 5433) == DEFAULT_PORT_ALLOCATOR.port_for("replica", 5433)


def test_explicit_seed_is_reproducible() -> None:
    first = TunnelPortAllocator(seed=42)
    second = TunnelPortAllocator(seed=42)

    assert first.seed == 42
    assert first.port_for("db.internal", 5432) == second.port_for("db.internal", 5432)
