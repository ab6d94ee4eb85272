import logging

import pytest
from pydantic import ValidationError

from phiaccrual.core.exception import ConfigurationError
from phiaccrual.core.phi import ExponentialModel, NormalModel
from phiaccrual.core.settings import DetectorSettings, load_settings
from phiaccrual.core.utils.log import setup_logging


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    for name in ("WINDOW_SIZE", "MIN_SAMPLES", "MODEL", "MIN_STD_DEVIATION"):
        monkeypatch.delenv(f"PHIACCRUAL_{name}", raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.mark.ut
def test_defaults():
    settings = DetectorSettings()
    assert settings.window_size == 1000
    assert settings.min_samples == 5
    assert settings.model == "exponential"
    assert isinstance(settings.build_model(), ExponentialModel)


@pytest.mark.ut
def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PHIACCRUAL_WINDOW_SIZE", "50")
    monkeypatch.setenv("PHIACCRUAL_MODEL", "normal")
    monkeypatch.setenv("PHIACCRUAL_MIN_STD_DEVIATION", "25")

    settings = DetectorSettings()
    assert settings.window_size == 50
    model = settings.build_model()
    assert isinstance(model, NormalModel)
    assert model.min_std_deviation == 25.0


@pytest.mark.ut
@pytest.mark.parametrize(
    "kwargs",
    [
        {"window_size": 0},
        {"min_samples": -1},
        {"model": "weibull"},
        {"min_std_deviation": 0},
    ],
)
def test_invalid_values_are_rejected(kwargs):
    with pytest.raises(ValidationError):
        DetectorSettings(**kwargs)


@pytest.mark.ut
def test_load_from_yaml_file(tmp_path):
    config = tmp_path / "detector.yaml"
    config.write_text("window_size: 20\nmin_samples: 3\nmodel: normal\n")

    settings = load_settings(config)
    assert settings.window_size == 20
    assert settings.min_samples == 3
    assert settings.model == "normal"


@pytest.mark.ut
def test_environment_wins_over_yaml_file(tmp_path, monkeypatch):
    config = tmp_path / "detector.yaml"
    config.write_text("window_size: 20\n")
    monkeypatch.setenv("PHIACCRUAL_WINDOW_SIZE", "40")

    assert load_settings(config).window_size == 40
    assert load_settings(config, window_size=60).window_size == 60


@pytest.mark.ut
def test_default_yaml_file_in_working_directory(tmp_path):
    (tmp_path / "phiaccrual.yaml").write_text("min_samples: 9\n")
    assert load_settings().min_samples == 9


@pytest.mark.ut
def test_missing_yaml_file_raises(tmp_path):
    with pytest.raises(ConfigurationError):
        load_settings(tmp_path / "nope.yaml")


@pytest.mark.ut
def test_setup_logging(monkeypatch):
    captured = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: captured.update(kwargs))

    logger = logging.getLogger("phiaccrual")
    previous = logger.level
    try:
        setup_logging("DEBUG")

        assert captured["level"] == "DEBUG"
        assert "%(levelname)-8s" in captured["format"]
        assert logging.getLogger("phiaccrual.core.detector").getEffectiveLevel() == logging.DEBUG
    finally:
        logger.setLevel(previous)
