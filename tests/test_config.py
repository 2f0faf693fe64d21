"""Tests for Settings."""

import pytest

from org_provisioning.shared.config import Settings
from org_provisioning.shared.exceptions import ConfigurationError


class TestSettings:
    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.default_public_visibility is True
        assert settings.log_level == "INFO"
        assert settings.state_file == "orgctl-state.json"

    @pytest.mark.parametrize("raw, expected", [("false", False), ("0", False), ("No", False), ("TRUE", True), ("1", True)])
    def test_visibility_from_env(self, raw, expected):
        settings = Settings.from_env({"ORG_DEFAULT_PUBLIC_VISIBILITY": raw})
        assert settings.default_public_visibility is expected

    def test_invalid_boolean_rejected(self):
        with pytest.raises(ConfigurationError, match="default_public_visibility"):
            Settings.from_env({"ORG_DEFAULT_PUBLIC_VISIBILITY": "maybe"})

    def test_log_level_upper_cased(self):
        assert Settings.from_env({"LOG_LEVEL": "debug"}).log_level == "DEBUG"

    def test_set_property(self):
        settings = Settings()
        settings.set_property("default_public_visibility", False)
        assert settings.default_public_visibility is False

    def test_unknown_property_rejected(self):
        with pytest.raises(ConfigurationError, match="unknown setting"):
            Settings().set_property("nope", 1)
