from pathlib import Path

import pytest

from systematic_reasoning.modules.core.config import (
    DEFAULT_GLOBAL_THRESHOLD,
    DEFAULT_LOCAL_THRESHOLD,
    DEFAULT_MAX_REFLECTIONS,
    Settings,
)
from systematic_reasoning.modules.core.errors import ValidationError


def test_settings_defaults_from_empty_env():
    settings = Settings.from_env({})
    assert settings.max_reflections == DEFAULT_MAX_REFLECTIONS == 20
    assert settings.local_threshold == DEFAULT_LOCAL_THRESHOLD
    assert settings.global_threshold == DEFAULT_GLOBAL_THRESHOLD
    assert settings.local_threshold > settings.global_threshold
    assert settings.home.name == ".systematic-reasoning"


def test_settings_read_environment(tmp_path):
    settings = Settings.from_env(
        {
            "SYSREASON_HOME": str(tmp_path),
            "SYSREASON_MAX_REFLECTIONS": "5",
            "SYSREASON_LOCAL_THRESHOLD": "0.7",
            "SYSREASON_DEFAULT_BUDGET": "500",
            "SYSREASON_LOG_LEVEL": "debug",
        }
    )
    assert settings.home == tmp_path
    assert settings.max_reflections == 5
    assert settings.local_threshold == 0.7
    assert settings.default_token_budget == 500
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    "env",
    [
        {"SYSREASON_MAX_REFLECTIONS": "many"},
        {"SYSREASON_MAX_REFLECTIONS": "0"},
        {"SYSREASON_GLOBAL_THRESHOLD": "1.5"},
        {"SYSREASON_DEFAULT_BUDGET": "9000"},
    ],
)
def test_settings_reject_bad_values(env):
    with pytest.raises(ValidationError):
        Settings.from_env(env)


def test_with_home_overrides_only_when_given(tmp_path):
    settings = Settings.from_env({})
    assert settings.with_home(None) is settings
    assert settings.with_home(str(tmp_path)).home == Path(tmp_path)
