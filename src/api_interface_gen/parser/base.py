"""Input models for a parsed API description.

The RAML loader converts its input into these models. The generator only
reads them; everything it synthesizes lives in generator/models.py.
"""

import re

from pydantic import BaseModel, PrivateAttr, model_validator

URI_PARAMETER_PATTERN = re.compile(r"\{([^{}]+)\}")


class TypeRef(BaseModel):
    """A resolved semantic type, e.g. ``str`` or ``list[User]``."""

    name: str
    args: list["TypeRef"] = []

    @property
    def is_generic(self) -> bool:
        return bool(self.args)

    def render(self) -> str:
        if not self.args:
            return self.name
        return f"{self.name}[{', '.join(a.render() for a in self.args)}]"

    @classmethod
    def of(cls, name: str) -> "TypeRef":
        return cls(name=name)

    @classmethod
    def sequence(cls, item: "TypeRef") -> "TypeRef":
        return cls(name="list", args=[item])

    @classmethod
    def mapping(cls, key: "TypeRef", value: "TypeRef") -> "TypeRef":
        return cls(name="dict", args=[key, value])


class Param(BaseModel):
    """A declared header, query or URI parameter."""

    name: str
    type: TypeRef = TypeRef(name="str")
    repeated: bool = False
    required: bool = False
    default: str | None = None
    description: str = ""
    example: str | None = None


class MimeType(BaseModel):
    """One body variant: media type, example payload and resolved type."""

    media_type: str
    example: str | None = None
    type: TypeRef | None = None


class Response(BaseModel):
    description: str = ""
    body: dict[str, MimeType] = {}
    headers: dict[str, Param] = {}

    @property
    def has_body(self) -> bool:
        return bool(self.body)


class Action(BaseModel):
    """One HTTP verb on a resource."""

    method: str  # GET / POST / PUT / DELETE / PATCH / HEAD / OPTIONS
    description: str = ""
    body: dict[str, MimeType] = {}
    responses: dict[str, Response] = {}
    headers: dict[str, Param] = {}
    query_parameters: dict[str, Param] = {}
    traits: list[str] = []

    _resource: "Resource | None" = PrivateAttr(default=None)

    @property
    def resource(self) -> "Resource | None":
        return self._resource

    def unique_response_mime_types(self) -> list[MimeType]:
        """Distinct response body variants across all responses, first seen wins."""
        seen: dict[str, MimeType] = {}
        for response in self.responses.values():
            for mime_type in response.body.values():
                seen.setdefault(mime_type.media_type, mime_type)
        return list(seen.values())


class Resource(BaseModel):
    """A path segment node owning actions and child resources."""

    relative_uri: str
    description: str = ""
    resource_type: str | None = None
    traits: list[str] = []
    uri_parameters: dict[str, Param] = {}
    actions: list[Action] = []
    resources: list["Resource"] = []

    _parent: "Resource | None" = PrivateAttr(default=None)

    @model_validator(mode="after")
    def _link_children(self) -> "Resource":
        for action in self.actions:
            action._resource = self
        for child in self.resources:
            child._parent = self
        return self

    @property
    def parent(self) -> "Resource | None":
        return self._parent

    @property
    def full_path(self) -> str:
        prefix = self._parent.full_path if self._parent is not None else ""
        return prefix.rstrip("/") + "/" + self.relative_uri.strip("/")

    def resolved_uri_parameters(self) -> dict[str, Param]:
        """URI parameters of this resource and its ancestors, ancestors first."""
        params = self._parent.resolved_uri_parameters() if self._parent is not None else {}
        params.update(self.uri_parameters)
        return params

    def path_parameters(self) -> list[Param]:
        """Declared URI parameters plus implicit ones for undeclared placeholders."""
        declared = self.resolved_uri_parameters()
        params = list(declared.values())
        for name in URI_PARAMETER_PATTERN.findall(self.full_path):
            if name not in declared:
                declared[name] = Param(name=name, required=True)
                params.append(declared[name])
        return params


class Template(BaseModel):
    """A named resource type or trait."""

    name: str
    description: str = ""
    parameters: list[str] = []  # <<placeholder>> names, reserved ones excluded
    body: dict = {}


class ApiDescription(BaseModel):
    """The whole parsed document."""

    title: str = ""
    base_uri: str = ""
    resources: list[Resource] = []
    resource_types: list[dict[str, Template]] = []
    traits: list[dict[str, Template]] = []
