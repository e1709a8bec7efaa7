from pathlib import Path

import pytest
from pydantic import ValidationError

from api_interface_gen.config import GeneratorConfig, load_config

FIXTURES = Path(__file__).parent / "fixtures"


class TestGeneratorConfig:
    def test_defaults(self):
        config = GeneratorConfig()
        assert config.base_package == "generated"
        assert config.async_trait is None
        assert config.empty_response_returns_void is False

    def test_blank_async_trait_disables_async(self):
        assert GeneratorConfig(async_trait="  ").async_trait is None

    def test_namespaces(self):
        config = GeneratorConfig(base_package="acme")
        assert config.namespace("service") == "acme.resource"
        assert config.namespace("client") == "acme.client"


class TestLoadConfig:
    def test_load_yaml(self):
        config = load_config(FIXTURES / "config.yaml")
        assert config.base_package == "library"
        assert config.async_trait == "async"
        assert config.throws_type == "LibraryError"
        assert config.empty_response_returns_void is True

    def test_empty_file(self, tmp_path):
        f = tmp_path / "empty.yaml"
        f.write_text("")
        assert load_config(f) == GeneratorConfig()

    def test_unknown_keys_rejected(self, tmp_path):
        f = tmp_path / "bad.yaml"
        f.write_text("base_pkg: oops\n")
        with pytest.raises(ValidationError):
            load_config(f)
