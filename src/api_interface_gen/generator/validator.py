"""Validates emitted source files before they are written."""

import ast


def module_path(filename: str) -> str:
    """Dotted module path of an emitted file, e.g. ``generated.resource.users_resource``."""
    return filename.removesuffix(".py").replace("/", ".")


def validate_python(files: dict[str, str]) -> dict[str, str]:
    """Parse every non-empty emitted module.

    Returns {filename: "module:line: message"} for modules that fail to parse.
    """
    errors = {}
    for filename, content in files.items():
        if not filename.endswith(".py") or not content.strip():
            continue
        try:
            ast.parse(content, filename=filename)
        except SyntaxError as e:
            errors[filename] = f"{module_path(filename)}:{e.lineno}: {e.msg}"
    return errors


def validate_module_paths(files: dict[str, str]) -> dict[str, str]:
    """Check that every emitted file path is importable as a module."""
    errors = {}
    for filename in files:
        parts = filename.removesuffix(".py").split("/")
        bad = [p for p in parts if not p.isidentifier()]
        if bad:
            errors[filename] = f"Invalid module name: {bad[0]!r}"
    return errors


def validate_files(files: dict[str, str]) -> dict[str, str]:
    """Module path checks first, then syntax; a file failing both reports the syntax error."""
    errors = {}
    errors.update(validate_module_paths(files))
    errors.update(validate_python(files))
    return errors
