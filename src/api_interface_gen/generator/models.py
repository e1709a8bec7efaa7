"""Models synthesized during one generation run.

They are created fresh per run, mutated by the assembler and by extensions,
and treated as read-only once handed to the emitter.
"""

from enum import Enum

from pydantic import BaseModel

from api_interface_gen.errors import DuplicateMethodNameError, DuplicateParameterNameError
from api_interface_gen.parser.base import TypeRef

VOID = TypeRef(name="None")
OPAQUE_STREAM = TypeRef(name="typing.BinaryIO")
FREE_FORM_HEADERS = TypeRef.mapping(TypeRef.of("str"), TypeRef.sequence(TypeRef.of("object")))


class ParameterKind(str, Enum):
    TEMPLATE = "template"
    PATH = "path"
    HEADER = "header"
    QUERY = "query"
    BODY = "body"
    ASYNC = "async"
    FREE_FORM = "free_form"


class ParameterModel(BaseModel):
    name: str
    type: TypeRef
    kind: ParameterKind
    source_name: str | None = None  # declared name, e.g. the raw header name
    repeated: bool = False
    required: bool = False
    default: str | None = None
    description: str = ""


class AttachmentKind(str, Enum):
    SIMPLE = "simple"
    REPEATED_LOOP = "repeated_loop"
    AGGREGATE = "aggregate"
    ENTITY = "entity"


ATTACHMENT_ORDER = [
    AttachmentKind.SIMPLE,
    AttachmentKind.REPEATED_LOOP,
    AttachmentKind.AGGREGATE,
    AttachmentKind.ENTITY,
]


class Attachment(BaseModel):
    """One step applied to the response builder expression.

    ``header`` is the wire header name, ``argument`` the parameter that
    supplies the value and ``literal`` a fixed value (e.g. the content type).
    """

    kind: AttachmentKind
    header: str | None = None
    argument: str | None = None
    literal: str | None = None


def _check_unique(parameters: list[ParameterModel], candidate: str, owner: str) -> None:
    if any(p.name == candidate for p in parameters):
        raise DuplicateParameterNameError(
            f"parameter '{candidate}' already declared on '{owner}'", identity=candidate
        )


def _check_all_unique(parameters: list[ParameterModel], owner: str) -> None:
    seen: set[str] = set()
    for param in parameters:
        if param.name in seen:
            raise DuplicateParameterNameError(
                f"parameter '{param.name}' declared twice on '{owner}'", identity=param.name
            )
        seen.add(param.name)


class BuilderMethodModel(BaseModel):
    """A static factory on a response wrapper for one status/body pair."""

    name: str
    status_code: int
    status_literal: str  # the declared key, emitted verbatim
    mime_type: str | None = None
    description: str = ""
    parameters: list[ParameterModel] = []
    attachments: list[Attachment] = []

    def add_parameter(self, param: ParameterModel) -> ParameterModel:
        _check_unique(self.parameters, param.name, self.name)
        self.parameters.append(param)
        return param

    def attachments_in_order(self) -> bool:
        """Whether simple headers precede loops, the aggregate and the entity."""
        ranks = [ATTACHMENT_ORDER.index(a.kind) for a in self.attachments]
        return ranks == sorted(ranks)


class ResponseWrapperModel(BaseModel):
    """Synthesized type grouping every declared response of one action."""

    name: str
    delegate_argument: str = "delegate"
    builders: list[BuilderMethodModel] = []

    def add_builder(self, builder: BuilderMethodModel) -> BuilderMethodModel:
        if any(b.name == builder.name for b in self.builders):
            raise DuplicateMethodNameError(
                f"response builder '{builder.name}' already declared on '{self.name}'",
                identity=builder.status_literal,
            )
        self.builders.append(builder)
        return builder


class ClientInvocation(BaseModel):
    """Request a client-proxy method issues against its base target."""

    verb: str
    entity_argument: str | None = None
    request_mime_type: str | None = None
    expected_type: TypeRef | None = None

    @property
    def expects_generic(self) -> bool:
        return self.expected_type is not None and self.expected_type.is_generic


class MethodModel(BaseModel):
    name: str
    return_type: TypeRef
    response_wrapper: str | None = None
    verb: str
    path: str
    consumes: list[str] = []
    produces: list[str] = []
    throws: str | None = None
    is_async: bool = False
    description: str = ""
    parameters: list[ParameterModel] = []
    invocation: ClientInvocation | None = None

    def add_parameter(self, param: ParameterModel) -> ParameterModel:
        _check_unique(self.parameters, param.name, self.name)
        self.parameters.append(param)
        return param

    def check_parameter_names(self) -> None:
        _check_all_unique(self.parameters, self.name)

    def parameters_of(self, kind: ParameterKind) -> list[ParameterModel]:
        return [p for p in self.parameters if p.kind == kind]


class TemplateField(BaseModel):
    name: str
    source_name: str


class TemplateTypeModel(BaseModel):
    """Type synthesized for a resource type or trait binding."""

    name: str
    template_name: str
    is_trait: bool
    description: str = ""
    fields: list[TemplateField] = []


class InterfaceModel(BaseModel):
    name: str
    namespace: str
    path: str
    resource_path: str = "/"
    description: str = ""
    methods: list[MethodModel] = []
    response_wrappers: list[ResponseWrapperModel] = []

    def has_method(self, name: str) -> bool:
        return any(m.name == name for m in self.methods)

    def add_method(self, method: MethodModel) -> MethodModel:
        if self.has_method(method.name):
            raise DuplicateMethodNameError(
                f"method '{method.name}' already declared on '{self.name}'", identity=method.name
            )
        self.methods.append(method)
        return method

    def add_response_wrapper(self, wrapper: ResponseWrapperModel) -> ResponseWrapperModel:
        if any(w.name == wrapper.name for w in self.response_wrappers):
            raise DuplicateMethodNameError(
                f"response type '{wrapper.name}' already declared on '{self.name}'",
                identity=wrapper.name,
            )
        self.response_wrappers.append(wrapper)
        return wrapper

    def check_method_names(self) -> None:
        seen: set[str] = set()
        for method in self.methods:
            if method.name in seen:
                raise DuplicateMethodNameError(
                    f"method '{method.name}' declared twice on '{self.name}'", identity=method.name
                )
            seen.add(method.name)
        for method in self.methods:
            method.check_parameter_names()


class GenerationResult(BaseModel):
    """Everything one run produced, in traversal order."""

    strategy: str
    interfaces: list[InterfaceModel] = []
    template_types: list[TemplateTypeModel] = []
