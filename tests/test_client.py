"""Tests for probe scheduling, client orchestration, config and CLI."""
import asyncio

import pytest

from netclock.__main__ import build_config, parse_args
from netclock.client import ClockClient
from netclock.compression import LZ4Codec
from netclock.config import ClockConfig, ConfigError
from netclock.probe import ProbeScheduler
from netclock.stats import ClockStats
from netclock.sync_processor import LatencySnapshot, SyncProcessor
from netclock.sync_protocol import MessageType, SyncMessage, current_time_ms, decode_message
from netclock.transport import Reliability


# ---- ProbeScheduler ----------------------------------------------------------

def test_probe_is_unreliable_on_sync_channel(transport, local_time):
    config = ClockConfig(sync_channel=3, server_peer_id=7)
    scheduler = ProbeScheduler(transport, config, time_source=local_time)

    asyncio.run(scheduler.send_probe())

    payload, target, reliability, channel = transport.sent[0]
    assert target == 7
    assert reliability is Reliability.UNRELIABLE
    assert channel == 3
    msg_type, msg = decode_message(payload)
    assert msg_type == MessageType.SYNC_REQUEST
    assert msg == SyncMessage(local_time.now_ms, 0)
    assert scheduler.probes_sent == 1


def test_probe_compressed_when_codec_enabled(transport, local_time):
    codec = LZ4Codec()
    scheduler = ProbeScheduler(transport, ClockConfig(), codec, time_source=local_time)
    asyncio.run(scheduler.send_probe())

    payload = transport.sent[0][0]
    _, msg = decode_message(codec.decompress(payload))
    assert msg.client_send_time_ms == local_time.now_ms


def test_scheduler_repeats_until_stopped(transport):
    scheduler = ProbeScheduler(transport, ClockConfig(sample_rate_ms=10))

    async def scenario():
        task = asyncio.create_task(scheduler.run())
        await asyncio.sleep(0.055)
        scheduler.stop()
        await asyncio.wait_for(task, timeout=1.0)

    asyncio.run(scenario())
    assert 3 <= len(transport.sent) <= 7
    assert not scheduler.running


def test_send_failure_is_not_retried(local_time):
    class FailingTransport:
        calls = 0

        async def send(self, payload, target_id, reliability, channel):
            FailingTransport.calls += 1
            raise ConnectionError("link down")

    scheduler = ProbeScheduler(FailingTransport(), ClockConfig(), time_source=local_time)
    asyncio.run(scheduler.send_probe())
    assert FailingTransport.calls == 1
    assert scheduler.probes_sent == 0


# ---- ClockClient -------------------------------------------------------------

def _reply(server_time_ms, client_send_time_ms=None, codec=None):
    if client_send_time_ms is None:
        client_send_time_ms = current_time_ms()
    data = SyncMessage(client_send_time_ms, server_time_ms).encode(reply=True)
    return codec.compress(data) if codec else data


def test_client_routes_replies_to_processor(transport):
    client = ClockClient(config=ClockConfig(sample_size=2, compression=False), transport=transport)

    transport.deliver(1, _reply(0))
    assert client.processor.replies_received == 1


def test_client_ignores_sync_requests(transport):
    client = ClockClient(config=ClockConfig(compression=False), transport=transport)
    transport.deliver(1, SyncMessage(1, 0).encode())
    assert client.processor.replies_received == 0
    assert client.decode_errors == 0


def test_client_drops_undecodable_payloads(transport):
    client = ClockClient(config=ClockConfig(), transport=transport)
    transport.deliver(1, b"\xff\xff\xff\xff")
    transport.deliver(1, client.codec.compress(b"\x04\x00"))
    assert client.decode_errors == 2
    assert client.processor.replies_received == 0


def test_client_corrects_clock_after_window(transport):
    client = ClockClient(config=ClockConfig(sample_size=2), transport=transport)
    published = []
    client.add_latency_listener(published.append)

    now = current_time_ms()
    for _ in range(2):
        transport.deliver(1, _reply(50_000, client_send_time_ms=now, codec=client.codec))

    assert len(published) == 1
    assert isinstance(published[0], LatencySnapshot)
    client.clock.advance(0.0)
    # Latency is at most a few ms in this in-process round trip
    assert 50_000 <= client.current_time_ms <= 50_010
    assert client.stats.publications == 1


def test_client_lifecycle(transport):
    client = ClockClient(
        config=ClockConfig(sample_rate_ms=10, frame_rate=200, compression=False),
        transport=transport,
    )

    async def scenario():
        assert await client.connect()
        await asyncio.sleep(0.1)
        await client.close()

    asyncio.run(scenario())
    assert transport.connected
    assert transport.closed
    assert transport.on_message is None
    assert len(transport.sent) >= 2
    assert 50 <= client.current_time_ms <= 500


def test_stats_readout(clock, config, local_time):
    processor = SyncProcessor(clock, config, time_source=local_time)
    stats = ClockStats(clock, processor, LZ4Codec())
    stats.attach()
    for _ in range(3):
        processor.on_reply(SyncMessage(local_time.now_ms - 20, 100))

    text = str(stats)
    assert "avg=10ms" in text
    assert "windows=1" in text
    assert stats.avg_latency_ms == 10.0

    stats.detach()
    for _ in range(3):
        processor.on_reply(SyncMessage(local_time.now_ms - 20, 100))
    assert stats.publications == 1


# ---- Config / CLI ------------------------------------------------------------

def test_config_defaults():
    config = ClockConfig()
    assert config.sample_size == 11
    assert config.sample_rate_ms == 500
    assert config.min_latency_floor_ms == 20


@pytest.mark.parametrize("kwargs", [
    {"sample_size": 1},
    {"sample_rate_ms": 0},
    {"sample_rate_ms": -5},
    {"min_latency_floor_ms": -1},
    {"ticks_per_second": 0},
    {"frame_rate": -60},
])
def test_config_rejects_invalid_values(kwargs):
    with pytest.raises(ConfigError):
        ClockConfig(**kwargs)


def test_cli_builds_config():
    args = parse_args(["--sample-size", "5", "--min-latency", "30", "--no-compression"])
    config = build_config(args)
    assert config.sample_size == 5
    assert config.min_latency_floor_ms == 30
    assert config.compression is False


def test_cli_invalid_config_exits():
    from netclock.__main__ import main

    with pytest.raises(SystemExit) as exc:
        main(["--sample-size", "1"])
    assert exc.value.code == 2
