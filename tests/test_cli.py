from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

from api_interface_gen.cli import _build_config, main
from api_interface_gen.errors import TemplateResolutionError

FIXTURES = Path(__file__).parent / "fixtures"


class TestCliGenerate:
    def test_generate_service_interfaces(self, tmp_path):
        runner = CliRunner()
        result = runner.invoke(main, [
            "generate", str(FIXTURES / "library.raml"),
            "-o", str(tmp_path),
        ])

        assert result.exit_code == 0, result.output
        assert (tmp_path / "generated" / "resource" / "books_resource.py").exists()
        assert (tmp_path / "generated" / "templates.py").exists()
        assert "Found 3 resources." in result.output

    def test_generate_with_config_and_client_strategy(self, tmp_path):
        runner = CliRunner()
        result = runner.invoke(main, [
            "generate", str(FIXTURES / "library.raml"),
            "-o", str(tmp_path),
            "--config", str(FIXTURES / "config.yaml"),
            "--strategy", "client",
        ])

        assert result.exit_code == 0, result.output
        source = (tmp_path / "library" / "client" / "books_resource.py").read_text()
        assert "class BooksResource:" in source

    def test_generation_error_is_reported(self, tmp_path):
        runner = CliRunner()
        with patch("api_interface_gen.cli.InterfaceGenerator") as MockGenerator:
            MockGenerator.return_value.generate.side_effect = TemplateResolutionError("bad trait", identity="x")
            result = runner.invoke(main, [
                "generate", str(FIXTURES / "library.raml"),
                "-o", str(tmp_path),
            ])

        assert result.exit_code != 0
        assert "bad trait" in result.output

    def test_validation_failure_aborts(self, tmp_path):
        runner = CliRunner()
        with patch("api_interface_gen.cli.validate_files", return_value={"generated/x.py": "SyntaxError"}):
            result = runner.invoke(main, [
                "generate", str(FIXTURES / "library.raml"),
                "-o", str(tmp_path),
            ])

        assert result.exit_code != 0
        assert not (tmp_path / "generated").exists()

    def test_missing_document(self, tmp_path):
        runner = CliRunner()
        result = runner.invoke(main, ["generate", str(tmp_path / "nope.raml"), "-o", str(tmp_path)])
        assert result.exit_code != 0


class TestBuildConfig:
    def test_defaults_without_file(self):
        config = _build_config(None, None, None, None)
        assert config.base_package == "generated"

    def test_overrides_win_over_file(self):
        config = _build_config(FIXTURES / "config.yaml", "acme", None, False)
        assert config.base_package == "acme"
        assert config.async_trait == "async"
        assert config.empty_response_returns_void is False
