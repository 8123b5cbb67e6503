"""Tests for parameter parsing and logging setup."""

import json
import logging

import pytest
from pydantic import ValidationError

from adpredictor.config import ModelConfiguration, parse_params, setup_logging
from adpredictor.errors import ConfigurationError


class TestParseParams:

    def test_beta_parsed(self):
        cfg = parse_params({"beta": "0.1"})
        assert cfg.beta == 0.1
        assert cfg.init_var == 1.0

    def test_whitespace_tolerated(self):
        assert parse_params({"beta": " 2.5 "}).beta == 2.5

    def test_zero_beta_allowed(self):
        assert parse_params({"beta": "0"}).beta == 0.0

    def test_init_var_not_configurable(self):
        cfg = parse_params({"beta": "0.1", "init_var": "5.0"})
        assert cfg.init_var == 1.0

    @pytest.mark.parametrize("params", [
        {},
        {"beta": ""},
        {"beta": "0.1x"},
        {"beta": "-1"},
        {"beta": "nan"},
        {"beta": "-inf"},
    ])
    def test_invalid_beta(self, params):
        with pytest.raises(ConfigurationError):
            parse_params(params)

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_params({"beta": "oops"})


class TestModelConfiguration:

    def test_frozen(self):
        cfg = ModelConfiguration(beta=0.1)
        with pytest.raises(ValidationError):
            cfg.beta = 0.2

    def test_init_var_must_be_positive(self):
        with pytest.raises(ValidationError):
            ModelConfiguration(beta=0.1, init_var=0.0)

    def test_variance_floor(self):
        assert ModelConfiguration(beta=0.1, init_var=2.0).variance_floor == pytest.approx(0.02)


def test_setup_logging_emits_json(capsys):
    setup_logging("INFO")
    logging.getLogger("adpredictor.test").info("hello_world")
    out = capsys.readouterr().out.strip().splitlines()[-1]
    record = json.loads(out)
    assert record["message"] == "hello_world"
    assert record["levelname"] == "INFO"
    logging.getLogger().handlers.clear()
