from api_interface_gen.generator.validator import module_path, validate_files, validate_module_paths, validate_python


class TestModulePath:
    def test_dotted(self):
        assert module_path("generated/resource/users_resource.py") == "generated.resource.users_resource"


class TestValidatePython:
    def test_valid_code(self):
        errors = validate_python({"pkg/ok.py": "import os\nx = 1\n"})
        assert errors == {}

    def test_syntax_error_names_module_and_line(self):
        errors = validate_python({"pkg/bad.py": "x = 1\ndef foo(\n"})
        assert errors["pkg/bad.py"].startswith("pkg.bad:")
        assert list(errors) == ["pkg/bad.py"]

    def test_skips_non_python(self):
        errors = validate_python({"data.yaml": "key: [", "ok.py": "x = 1"})
        assert errors == {}

    def test_skips_empty_files(self):
        assert validate_python({"pkg/empty.py": "  \n"}) == {}


class TestValidateModulePaths:
    def test_valid_paths(self):
        assert validate_module_paths({"generated/resource/users_resource.py": ""}) == {}

    def test_invalid_segment(self):
        errors = validate_module_paths({"generated/my-pkg/users.py": ""})
        assert "my-pkg" in errors["generated/my-pkg/users.py"]


class TestValidateFiles:
    def test_all_valid(self):
        assert validate_files({"a/b.py": "x = 1\n"}) == {}

    def test_errors_are_merged(self):
        errors = validate_files({"a-b/c.py": "x = 1\n", "a/d.py": "def (\n"})
        assert set(errors) == {"a-b/c.py", "a/d.py"}
        assert errors["a/d.py"].startswith("a.d:1:")
