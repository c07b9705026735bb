"""Tests for scan id propagation."""

import contextvars
import logging
import threading

from playshelf.logging.context import ScanContextFilter, get_scan_id, scan_context


def make_record() -> logging.LogRecord:
    return logging.LogRecord("t", logging.INFO, __file__, 1, "msg", None, None)


class TestScanContext:
    def test_outside_a_scan(self) -> None:
        assert get_scan_id() is None

    def test_binds_and_resets(self) -> None:
        with scan_context("s1"):
            assert get_scan_id() == "s1"
            with scan_context("s2"):
                assert get_scan_id() == "s2"
            assert get_scan_id() == "s1"
        assert get_scan_id() is None

    def test_reset_after_exception(self) -> None:
        try:
            with scan_context("s1"):
                raise KeyError("x")
        except KeyError:
            pass
        assert get_scan_id() is None

    def test_copied_context_reaches_threads(self) -> None:
        seen = []
        with scan_context("s1"):
            ctx = contextvars.copy_context()
        thread = threading.Thread(
            target=ctx.run, args=(lambda: seen.append(get_scan_id()),)
        )
        thread.start()
        thread.join()
        assert seen == ["s1"]


class TestScanContextFilter:
    def test_adds_tag_inside_scan(self) -> None:
        record = make_record()
        with scan_context("abc"):
            assert ScanContextFilter().filter(record) is True
        assert record.scan_id == "abc"
        assert record.scan_tag == "[scan abc] "

    def test_empty_tag_outside_scan(self) -> None:
        record = make_record()
        ScanContextFilter().filter(record)
        assert record.scan_id is None
        assert record.scan_tag == ""
