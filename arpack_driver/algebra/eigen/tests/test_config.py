"""
Tests for configuration and logging helpers.
"""

import logging

import numpy as np
import pytest

from arpack_driver.algebra import utils
from arpack_driver.common.flog import Logger, get_global_logger

class TestConfig:

    def test_default_tolerance(self):
        assert utils.resolve_tol(None) == utils.DEFAULT_TOL
        assert utils.resolve_tol(1e-5) == 1e-5

    def test_integer_width(self):
        assert utils.arpack_int_type(False) is np.int32
        assert utils.arpack_int_type(True) is np.int64

    def test_env_float(self, monkeypatch):
        monkeypatch.setenv("ARPACK_TEST_TOL", "1e-9")
        assert utils._env_float("ARPACK_TEST_TOL", 0.5) == 1e-9
        monkeypatch.setenv("ARPACK_TEST_TOL", "tiny")
        with pytest.raises(ValueError):
            utils._env_float("ARPACK_TEST_TOL", 0.5)
        monkeypatch.delenv("ARPACK_TEST_TOL")
        assert utils._env_float("ARPACK_TEST_TOL", 0.5) == 0.5

    @pytest.mark.parametrize("raw, flag", [("1", True), ("yes", True), ("0", False), ("", False)])
    def test_env_flag(self, monkeypatch, raw, flag):
        monkeypatch.setenv("ARPACK_TEST_FLAG", raw)
        assert utils._env_flag("ARPACK_TEST_FLAG") is flag

class TestLogger:

    def test_global_logger_is_shared(self):
        assert get_global_logger() is get_global_logger()
        assert isinstance(get_global_logger(), Logger)

    def test_warning_is_emitted(self):
        log     = get_global_logger()
        records = []
        handler = logging.Handler()
        handler.emit = records.append
        log.logger.addHandler(handler)
        try:
            log.warning("only 1 of 2 Ritz values converged")
        finally:
            log.logger.removeHandler(handler)
        assert any("Ritz values" in r.getMessage() for r in records)

    def test_timing_logs_duration(self):
        log     = Logger(name="arpack_driver.timing_test", lvl='debug')
        records = []
        handler = logging.Handler()
        handler.emit = records.append
        log.logger.addHandler(handler)

        @log.timing
        def solve_twice(x):
            return 2 * x

        assert solve_twice(3) == 6
        assert solve_twice.__name__ == "solve_twice"
        assert any(r.levelno == logging.DEBUG and "solve_twice took" in r.getMessage() for r in records)

    def test_timing_logs_on_error(self):
        log     = Logger(name="arpack_driver.timing_error_test", lvl=logging.DEBUG)
        records = []
        handler = logging.Handler()
        handler.emit = records.append
        log.logger.addHandler(handler)

        @log.timing
        def failing():
            raise RuntimeError("no convergence")

        with pytest.raises(RuntimeError):
            failing()
        assert any("failing took" in r.getMessage() for r in records)

    def test_debug_hidden_at_info_level(self):
        log     = Logger(name="arpack_driver.level_test", lvl=logging.INFO)
        records = []
        handler = logging.Handler()
        handler.emit = records.append
        log.logger.addHandler(handler)
        log.debug("hidden")
        log.warning("shown")
        assert len(records) == 1
        assert "shown" in records[0].getMessage()

    def test_run_arpack_is_timed(self):
        from arpack_driver.algebra.eigen.driver import run_arpack
        assert run_arpack.__name__ == "run_arpack"
        assert hasattr(run_arpack, "__wrapped__")

# ------------------------------------------------------------------------------------------------
#! EOF
# ------------------------------------------------------------------------------------------------
