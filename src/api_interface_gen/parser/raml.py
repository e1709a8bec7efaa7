"""RAML 0.8 document loader.

Parses the YAML structure of a RAML document into ApiDescription models and
resolves every body and parameter to a semantic type.
"""

import json
import re
from pathlib import Path

import yaml

from api_interface_gen.errors import DescriptionError
from api_interface_gen.generator.names import type_name
from api_interface_gen.parser.base import (
    Action,
    ApiDescription,
    MimeType,
    Param,
    Resource,
    Response,
    Template,
    TypeRef,
)

HTTP_METHODS = ("get", "post", "put", "patch", "delete", "head", "options")
RESERVED_TEMPLATE_PARAMETERS = {"resourcePath", "resourcePathName", "methodName"}
TEMPLATE_PARAMETER_PATTERN = re.compile(r"<<\s*([A-Za-z_][\w-]*)\s*(?:\|[^>]*)?>>")

SCALAR_TYPES = {
    "string": "str",
    "integer": "int",
    "number": "float",
    "boolean": "bool",
    "date": "datetime.datetime",
    "file": "bytes",
}
ANY_OBJECT = TypeRef(name="dict", args=[TypeRef(name="str"), TypeRef(name="typing.Any")])


def parse_raml(file_path: Path) -> ApiDescription:
    """Parse a RAML file into an ApiDescription."""
    return parse_raml_text(file_path.read_text(encoding="utf-8"))


def parse_raml_text(text: str) -> ApiDescription:
    try:
        doc = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise DescriptionError(f"Invalid YAML: {e}") from e
    if not isinstance(doc, dict):
        raise DescriptionError("RAML document must be a mapping")

    schemas = _parse_schemas(doc.get("schemas", []))

    return ApiDescription(
        title=str(doc.get("title", "")),
        base_uri=str(doc.get("baseUri", "")),
        resource_types=_parse_templates(doc.get("resourceTypes", [])),
        traits=_parse_templates(doc.get("traits", [])),
        resources=[
            _parse_resource(uri, node or {}, schemas)
            for uri, node in doc.items()
            if isinstance(uri, str) and uri.startswith("/")
        ],
    )


def _as_list_of_maps(value, section: str) -> list[dict]:
    if value is None:
        return []
    if isinstance(value, dict):
        return [value]
    if not isinstance(value, list) or not all(isinstance(v, dict) for v in value):
        raise DescriptionError(f"'{section}' must be a list of mappings")
    return value


def _parse_schemas(value) -> dict[str, TypeRef]:
    schemas = {}
    for schema_map in _as_list_of_maps(value, "schemas"):
        for name in schema_map:
            schemas[name] = TypeRef(name=type_name(name))
    return schemas


def _parse_templates(value) -> list[dict[str, Template]]:
    templates = []
    for template_map in _as_list_of_maps(value, "templates"):
        parsed = {}
        for name, body in template_map.items():
            body = body or {}
            placeholders = TEMPLATE_PARAMETER_PATTERN.findall(yaml.safe_dump(body))
            parsed[name] = Template(
                name=name,
                description=str(body.get("description", "")) if isinstance(body, dict) else "",
                parameters=[p for p in dict.fromkeys(placeholders) if p not in RESERVED_TEMPLATE_PARAMETERS],
                body=body if isinstance(body, dict) else {},
            )
        templates.append(parsed)
    return templates


def _reference_name(value) -> str | None:
    """Name of a plain (``secured``) or parameterised (``{paged: {...}}``) reference."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, dict) and len(value) == 1:
        return next(iter(value))
    raise DescriptionError(f"Invalid template reference: {value!r}")


def _reference_names(value) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        value = [value]
    return [_reference_name(v) for v in value]


def _parse_resource(uri: str, node: dict, schemas: dict[str, TypeRef]) -> Resource:
    if not isinstance(node, dict):
        raise DescriptionError(f"Resource '{uri}' must be a mapping")
    return Resource(
        relative_uri=uri,
        description=str(node.get("description", "")),
        resource_type=_reference_name(node.get("type")),
        traits=_reference_names(node.get("is")),
        uri_parameters=_parse_parameters(node.get("uriParameters")),
        actions=[
            _parse_action(method, node[method] or {}, schemas)
            for method in node
            if method in HTTP_METHODS
        ],
        resources=[
            _parse_resource(child_uri, child or {}, schemas)
            for child_uri, child in node.items()
            if isinstance(child_uri, str) and child_uri.startswith("/")
        ],
    )


def _parse_action(method: str, node: dict, schemas: dict[str, TypeRef]) -> Action:
    return Action(
        method=method.upper(),
        description=str(node.get("description", "")),
        body=_parse_body(node.get("body"), schemas),
        responses={
            str(status_code): _parse_response(response or {}, schemas)
            for status_code, response in (node.get("responses") or {}).items()
        },
        headers=_parse_parameters(node.get("headers")),
        query_parameters=_parse_parameters(node.get("queryParameters")),
        traits=_reference_names(node.get("is")),
    )


def _parse_response(node: dict, schemas: dict[str, TypeRef]) -> Response:
    return Response(
        description=str(node.get("description", "")),
        body=_parse_body(node.get("body"), schemas),
        headers=_parse_parameters(node.get("headers")),
    )


def _parse_parameters(params: dict | None) -> dict[str, Param]:
    result = {}
    for name, p in (params or {}).items():
        p = p or {}
        param_type = SCALAR_TYPES.get(p.get("type", "string"), "str")
        example = p.get("example")
        default = p.get("default")
        result[name] = Param(
            name=name,
            type=TypeRef(name=param_type),
            repeated=bool(p.get("repeat", False)),
            required=bool(p.get("required", False)),
            default=str(default) if default is not None else None,
            description=str(p.get("description", "")),
            example=str(example) if example is not None else None,
        )
    return result


def _parse_body(body: dict | None, schemas: dict[str, TypeRef]) -> dict[str, MimeType]:
    result = {}
    for media_type, variant in (body or {}).items():
        variant = variant or {}
        example = variant.get("example")
        result[media_type] = MimeType(
            media_type=media_type,
            example=str(example).strip() if example is not None else None,
            type=_resolve_body_type(media_type, variant.get("schema"), schemas),
        )
    return result


def _resolve_body_type(media_type: str, schema, schemas: dict[str, TypeRef]) -> TypeRef | None:
    if isinstance(schema, str) and schema.strip() in schemas:
        return schemas[schema.strip()].model_copy()
    if isinstance(schema, str) and schema.strip().startswith("{"):
        return _inline_schema_type(schema)
    if schema:
        return TypeRef(name=type_name(str(schema)))
    if media_type.endswith("json"):
        return ANY_OBJECT.model_copy(deep=True)
    if media_type.startswith("text/"):
        return TypeRef(name="str")
    if media_type == "application/octet-stream":
        return TypeRef(name="bytes")
    return None


def _inline_schema_type(schema: str) -> TypeRef:
    try:
        data = json.loads(schema)
    except json.JSONDecodeError as e:
        raise DescriptionError(f"Invalid inline JSON schema: {e}") from e
    if not isinstance(data, dict):
        return ANY_OBJECT.model_copy(deep=True)
    if data.get("type") == "array" and isinstance(data.get("items"), dict):
        item_title = data["items"].get("title")
        if item_title:
            return TypeRef.sequence(TypeRef(name=type_name(item_title)))
        return TypeRef.sequence(ANY_OBJECT.model_copy(deep=True))
    if data.get("title"):
        return TypeRef(name=type_name(data["title"]))
    return ANY_OBJECT.model_copy(deep=True)
