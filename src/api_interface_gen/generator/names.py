"""Identifier synthesis for interfaces, methods, variables and response builders.

All functions are pure: the same input always yields the same identifier.
Collision detection is left to the callers that own a namespace.
"""

import keyword
import re

from api_interface_gen.parser.base import Action, MimeType, Resource

RESOURCE_INTERFACE_SUFFIX = "Resource"
RESPONSE_WRAPPER_SUFFIX = "Response"
RESPONSE_BUILDER_PREFIX = "with"
PATH_PARAMETER_PREFIX = "By"
ROOT_INTERFACE_NAME = "Root"

GENERIC_PAYLOAD_ARGUMENT_NAME = "entity"
MULTIPLE_RESPONSE_HEADERS_ARGUMENT_NAME = "headers"
RESPONSE_HEADER_WILDCARD_SYMBOL = "{?}"
EXAMPLE_PREFIX = "e.g. "

RESERVED_NAMES = frozenset(keyword.kwlist) | frozenset(keyword.softkwlist) | {"self", "cls"}

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_NON_WORD = re.compile(r"[\W_]+")


def split_words(source: str) -> list[str]:
    """Split text into lower-case words on symbols and camelCase boundaries."""
    spaced = _CAMEL_BOUNDARY.sub(" ", source)
    return [w.lower() for w in _NON_WORD.split(spaced) if w]


def type_name(source: str) -> str:
    """CapWords identifier, e.g. ``user-profile`` -> ``UserProfile``."""
    name = "".join(w.capitalize() for w in split_words(source))
    if name[:1].isdigit():
        name = "_" + name
    return name


def variable_name(source: str) -> str:
    """snake_case identifier safe to use as a parameter or field name."""
    name = "_".join(split_words(source))
    if not name:
        return "_"
    if name[0].isdigit():
        name = "_" + name
    if name in RESERVED_NAMES:
        name += "_"
    return name


def short_mime_type(mime_type: MimeType | None) -> str:
    """Token derived from the media subtype, e.g. ``application/xml`` -> ``xml``."""
    if mime_type is None:
        return ""
    sub_type = mime_type.media_type.lower().partition("/")[2]
    if "." in sub_type:
        # vendor types like application/vnd.example.v1+json
        return "_".join(w for w in re.split(r"\W+", sub_type) if w)
    for fragment in ("x-www-", "+", "-"):
        sub_type = sub_type.replace(fragment, "")
    return sub_type


def _path_words(path: str) -> list[str]:
    words = []
    for segment in path.split("/"):
        if not segment:
            continue
        if segment.startswith("{") and segment.endswith("}"):
            words.append(PATH_PARAMETER_PREFIX.lower())
            words.extend(split_words(segment[1:-1]))
        else:
            words.extend(split_words(segment))
    return words


def interface_name(resource: Resource) -> str:
    """Interface name from the full resource path.

    ``/users`` -> ``UsersResource``, ``/users/{id}`` -> ``UsersByIdResource``.
    """
    base = "".join(w.capitalize() for w in _path_words(resource.full_path))
    if not base:
        base = ROOT_INTERFACE_NAME
    elif base[0].isdigit():
        base = "_" + base
    return base + RESOURCE_INTERFACE_SUFFIX


def method_name(action: Action, body_mime_type: MimeType | None = None) -> str:
    """Verb prefix, path-derived words and, when given, the body mime token.

    Pass ``body_mime_type`` only when the action has several request bodies.
    """
    path = action.resource.full_path if action.resource is not None else ""
    words = [action.method.lower()] + _path_words(path)
    words += split_words(short_mime_type(body_mime_type))
    return "_".join(words)


def response_wrapper_name(method: str) -> str:
    return type_name(method) + RESPONSE_WRAPPER_SUFFIX


def template_type_name(template_name: str, is_trait: bool) -> str:
    base = type_name(template_name)
    if not base:
        return ""
    return base + ("Trait" if is_trait else "ResourceType")


def parse_status_code(status_key: str) -> int:
    """Integer status code; anything non-numeric resolves to 0."""
    key = status_key.strip()
    return int(key) if key.isdigit() else 0


def response_builder_method_name(status_key: str, mime_type: MimeType | None = None) -> str:
    """``with_200``, ``with_200_json``; non-numeric keys become ``with_0_<key>``.

    Pass ``mime_type`` only when the status has several body variants.
    """
    code = parse_status_code(status_key)
    name = f"{RESPONSE_BUILDER_PREFIX}_{code}"
    if code == 0 and status_key.strip() != "0":
        key_words = split_words(status_key)
        if key_words:
            name += "_" + "_".join(key_words)
    if mime_type is not None:
        token = short_mime_type(mime_type)
        token_words = split_words(token)
        if token_words:
            name += "_" + "_".join(token_words)
    return name
