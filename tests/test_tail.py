"""Tests for logz/tail.py"""

import os
import threading
import time

import pytest

from logz.errors import ConfigError, LogIOError
from logz.filters import FilterSpec
from logz.tail import TailFollower, TailState


def _append(path, text: str) -> None:
    with open(path, "a", encoding="utf-8") as f:
        f.write(text)


def _raw(records) -> list[str]:
    return [r.raw for r in records]


@pytest.fixture
def log_path(tmp_path):
    path = tmp_path / "tail.log"
    path.write_text("2024-01-02 03:04:05 INFO existing line\n")
    return path


class TestLifecycle:
    @pytest.mark.parametrize("interval", [0, -1.5, float("nan"), float("inf")])
    def test_invalid_interval(self, log_path, interval):
        with pytest.raises(ConfigError) as exc:
            TailFollower(str(log_path), interval=interval)
        assert exc.value.field == "--interval"

    def test_start_missing_file(self, tmp_path):
        follower = TailFollower(str(tmp_path / "missing.log"))
        with pytest.raises(LogIOError):
            follower.start()
        assert follower.state is TailState.IDLE

    def test_poll_before_start(self, log_path):
        with pytest.raises(RuntimeError):
            TailFollower(str(log_path)).poll_once()

    def test_start_seeks_to_end(self, log_path):
        with TailFollower(str(log_path)) as follower:
            follower.start()
            assert follower.state is TailState.FOLLOWING
            assert follower.offset == os.path.getsize(log_path)

    def test_context_manager_closes(self, log_path):
        with TailFollower(str(log_path)) as follower:
            follower.start()
        assert follower.state is TailState.CLOSED


class TestPolling:
    def test_skips_existing_content(self, log_path):
        with TailFollower(str(log_path)) as follower:
            follower.start()
            assert follower.poll_once() == []

            _append(log_path, "2024-01-02 03:04:06 ERROR new one\nsecond new\n")
            records = follower.poll_once()
            assert _raw(records) == ["2024-01-02 03:04:06 ERROR new one", "second new"]
            assert records[0].level == "ERROR"
            assert records[0].timestamp is not None
            assert records[0].source == str(log_path)

            assert follower.poll_once() == []

    def test_from_start_emits_existing(self, log_path):
        with TailFollower(str(log_path), from_start=True) as follower:
            follower.start()
            assert _raw(follower.poll_once()) == ["2024-01-02 03:04:05 INFO existing line"]

    def test_line_split_across_polls(self, log_path):
        with TailFollower(str(log_path)) as follower:
            follower.start()
            _append(log_path, "complete\nhalf of a ")
            assert _raw(follower.poll_once()) == ["complete"]
            assert follower.partial == b"half of a "

            assert follower.poll_once() == []

            _append(log_path, "line\r\nnext\n")
            assert _raw(follower.poll_once()) == ["half of a line", "next"]
            assert follower.partial == b""

    def test_offset_tracks_bytes_consumed(self, log_path):
        with TailFollower(str(log_path), from_start=True) as follower:
            follower.start()
            _append(log_path, "tail fragment")
            follower.poll_once()
            assert follower.offset == os.path.getsize(log_path)

    def test_applies_filters(self, log_path):
        spec = FilterSpec(levels=frozenset({"ERROR"}))
        with TailFollower(str(log_path), spec=spec) as follower:
            follower.start()
            _append(log_path, "INFO fine\nERROR broken\n")
            assert _raw(follower.poll_once()) == ["ERROR broken"]


class TestTruncationAndRotation:
    def test_truncation_restarts_from_zero(self, log_path):
        with TailFollower(str(log_path), from_start=True) as follower:
            follower.start()
            _append(log_path, "stale partial")
            follower.poll_once()
            assert follower.partial == b"stale partial"

            log_path.write_text("new\n")
            assert follower.poll_once() == []
            assert follower.offset == 0
            assert follower.partial == b""

            assert _raw(follower.poll_once()) == ["new"]

    def test_rotation_reopens(self, log_path, tmp_path):
        with TailFollower(str(log_path)) as follower:
            follower.start()
            rotated = tmp_path / "next.log"
            rotated.write_text("after rotation with more bytes than before\n")
            os.replace(rotated, log_path)

            assert follower.poll_once() == []
            assert _raw(follower.poll_once()) == ["after rotation with more bytes than before"]

    def test_deleted_file_reports_error(self, log_path):
        with TailFollower(str(log_path)) as follower:
            follower.start()
            os.remove(log_path)
            with pytest.raises(LogIOError) as exc:
                follower.poll_once()
            assert exc.value.path == str(log_path)
            assert follower.state is TailState.FOLLOWING


class TestFollow:
    def test_preset_stop_closes_immediately(self, log_path):
        stop = threading.Event()
        stop.set()
        follower = TailFollower(str(log_path), stop_event=stop)
        assert list(follower.follow()) == []
        assert follower.state is TailState.CLOSED

    def test_emits_appended_lines(self, log_path):
        collected = []
        follower = TailFollower(str(log_path), interval=0.02)

        def reader():
            for record in follower.follow():
                collected.append(record.raw)
                if len(collected) >= 2:
                    follower.stop()

        t = threading.Thread(target=reader)
        t.start()
        time.sleep(0.1)
        _append(log_path, "new line 1\nnew line 2\n")
        t.join(timeout=3)

        assert not t.is_alive(), "Tail thread didn't finish in time"
        assert collected == ["new line 1", "new line 2"]
        assert follower.state is TailState.CLOSED

    def test_stop_interrupts_sleep(self, log_path):
        follower = TailFollower(str(log_path), interval=30)
        t = threading.Thread(target=lambda: list(follower.follow()))
        t.start()
        time.sleep(0.1)
        started = time.monotonic()
        follower.stop()
        t.join(timeout=3)

        assert not t.is_alive()
        assert time.monotonic() - started < 3
