"""Tests for dependency injection interfaces."""

import time

from roundtrip_arbitrage.interfaces import (
    ContentPayment,
    DeterministicRandomProvider,
    DeterministicTimeProvider,
    RandomProvider,
    SwapProvider,
    SystemRandomProvider,
    SystemTimeProvider,
    TimeProvider,
    Wallet,
)
from roundtrip_arbitrage.payments import MockPayment
from roundtrip_arbitrage.venues import MockPrimaryVenue, MockSecondaryVenue


def test_system_time_provider():
    """Test SystemTimeProvider."""
    provider = SystemTimeProvider()

    ts1 = provider.current_timestamp()
    time.sleep(0.01)
    ts2 = provider.current_timestamp()
    assert ts2 > ts1

    ms = provider.current_time_ms()
    assert isinstance(ms, int)
    assert ms > 0


def test_system_random_provider_is_seedable():
    """Same seed gives the same sequence."""
    a = SystemRandomProvider(seed=42)
    b = SystemRandomProvider(seed=42)
    assert [a.random() for _ in range(3)] == [b.random() for _ in range(3)]

    value = a.uniform(5.0, 10.0)
    assert 5.0 <= value <= 10.0

    a.seed(7)
    b.seed(7)
    assert a.random() == b.random()


def test_deterministic_time_provider():
    """Test DeterministicTimeProvider."""
    provider = DeterministicTimeProvider(start_time=1000.0)

    assert provider.current_timestamp() == 1000.0
    assert provider.current_time_ms() == 1_000_000

    provider.advance_time(5.5)
    assert provider.current_timestamp() == 1005.5

    provider.set_time(2000.0)
    assert provider.current_timestamp() == 2000.0


def test_deterministic_random_provider_replays_values():
    provider = DeterministicRandomProvider(values=[0.1, 0.9])

    assert [provider.random() for _ in range(4)] == [0.1, 0.9, 0.1, 0.9]


def test_deterministic_random_provider_uniform():
    provider = DeterministicRandomProvider(values=[0.0, 0.5])

    assert provider.uniform(2.0, 4.0) == 2.0
    assert provider.uniform(2.0, 4.0) == 3.0


def test_deterministic_random_provider_seeded():
    a = DeterministicRandomProvider(seed=1)
    b = DeterministicRandomProvider(seed=1)
    assert a.random() == b.random()


def test_protocol_conformance():
    """Test that implementations satisfy their runtime-checkable protocols."""
    assert isinstance(SystemTimeProvider(), TimeProvider)
    assert isinstance(DeterministicTimeProvider(), TimeProvider)
    assert isinstance(SystemRandomProvider(), RandomProvider)
    assert isinstance(DeterministicRandomProvider(), RandomProvider)
    assert isinstance(MockPrimaryVenue(), SwapProvider)
    assert isinstance(MockSecondaryVenue(), SwapProvider)
    assert isinstance(MockPayment(), ContentPayment)
    assert not isinstance(object(), Wallet)
