"""Tests for @logged decorator."""

import logging

import pytest

from vadseg.logging.decorator import logged


class TestLoggedDecorator:
    def test_entry_exit(self, caplog):
        @logged()
        def add(a, b):
            return a + b

        with caplog.at_level(logging.DEBUG):
            result = add(1, 2)
        assert result == 3
        messages = caplog.text
        assert "→" in messages
        assert "←" in messages

    def test_exit_carries_elapsed(self, caplog):
        @logged()
        def noop():
            return None

        with caplog.at_level(logging.DEBUG):
            noop()
        exit_record = [r for r in caplog.records if "←" in r.getMessage()][0]
        assert exit_record.extra_data["elapsed"].endswith("ms")

    def test_exception_logged_with_marker(self, caplog):
        @logged()
        def fail():
            raise ValueError("boom")

        with caplog.at_level(logging.DEBUG):
            with pytest.raises(ValueError, match="boom"):
                fail()
        failed = [r for r in caplog.records if "✗" in r.getMessage()][0]
        assert failed.levelno == logging.ERROR
        assert failed.extra_data["error"] == "boom"

    def test_log_args_includes_arguments(self, caplog):
        @logged(log_args=True)
        def score(window, threshold=0.5):
            return window * threshold

        with caplog.at_level(logging.DEBUG):
            score(4)
        # extra_data is stored on records, not in caplog.text (pytest formatter)
        entry_record = [r for r in caplog.records if "→" in r.getMessage()][0]
        assert entry_record.extra_data == {"window": 4, "threshold": 0.5}

    def test_log_result_includes_return_value(self, caplog):
        @logged(log_result=True)
        def double(x):
            return x * 2

        with caplog.at_level(logging.DEBUG):
            double(5)
        exit_record = [r for r in caplog.records if "←" in r.getMessage()][0]
        assert exit_record.extra_data["result"] == 10

    def test_entry_and_exit_can_be_disabled(self, caplog):
        @logged(entry=False, exit=False)
        def quiet():
            return 1

        with caplog.at_level(logging.DEBUG):
            quiet()
        assert "quiet" not in caplog.text

    def test_custom_level(self, caplog):
        @logged(level=logging.WARNING)
        def important():
            return 42

        with caplog.at_level(logging.WARNING):
            important()
        assert "important" in caplog.text

    def test_detector_methods_are_logged(self, caplog, make_config, scripted_engine):
        from vadseg.vad import Detector

        sd = Detector(make_config(), engine=scripted_engine([]))
        with caplog.at_level(logging.DEBUG, logger="vadseg.vad"):
            sd.reset()
        assert "Detector.reset" in caplog.text
