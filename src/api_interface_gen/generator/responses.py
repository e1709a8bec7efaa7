"""Response type synthesis.

Decides what a method returns and, for the service strategy, builds the
response wrapper: one static builder per (status code, body variant) pair.
Header handling is recorded as an ordered list of attachment directives so
that simple headers always precede repeated-header loops, which precede the
free-form ``headers`` aggregate and finally the entity.
"""

import logging

from api_interface_gen.errors import UnsupportedResponseShapeError
from api_interface_gen.generator.models import (
    FREE_FORM_HEADERS,
    VOID,
    Attachment,
    AttachmentKind,
    BuilderMethodModel,
    InterfaceModel,
    ParameterKind,
    ParameterModel,
    ResponseWrapperModel,
)
from api_interface_gen.generator.names import (
    EXAMPLE_PREFIX,
    GENERIC_PAYLOAD_ARGUMENT_NAME,
    MULTIPLE_RESPONSE_HEADERS_ARGUMENT_NAME,
    RESPONSE_HEADER_WILDCARD_SYMBOL,
    parse_status_code,
    response_builder_method_name,
    response_wrapper_name,
    variable_name,
)
from api_interface_gen.parser.base import Action, MimeType, Param, Response, TypeRef

logger = logging.getLogger(__name__)

CONTENT_TYPE_HEADER = "Content-Type"


def describe(text: str, example: str | None = None) -> str:
    """Join a description and an ``e.g.`` example into one doc line."""
    parts = [text.strip()] if text and text.strip() else []
    if example:
        parts.append(EXAMPLE_PREFIX + example)
    return " ".join(parts)


def parameter_type(param: Param) -> TypeRef:
    item = param.type.model_copy(deep=True)
    return TypeRef.sequence(item) if param.repeated else item


def response_entity_type(mime_type: MimeType, status_key: str | None = None) -> TypeRef:
    if mime_type.type is None:
        raise UnsupportedResponseShapeError(
            f"response body '{mime_type.media_type}' has no resolved type",
            identity=status_key or mime_type.media_type,
        )
    return mime_type.type.model_copy(deep=True)


class ResponseTypeSynthesizer:
    """Builds response wrappers and picks service method return types."""

    def __init__(self, empty_response_returns_void: bool = False):
        self.empty_response_returns_void = empty_response_returns_void

    def return_type(
        self,
        method_name: str,
        action: Action,
        returns_void: bool,
        is_async: bool,
        interface: InterfaceModel,
    ) -> tuple[TypeRef, ResponseWrapperModel | None]:
        """Return type for a service method plus the wrapper synthesized for it, if any.

        An async method returns nothing but still gets its wrapper so the
        continuation can resume with it.
        """
        if is_async:
            wrapper = self.create_wrapper(method_name, action, interface)
            return VOID.model_copy(), wrapper
        if returns_void and self.empty_response_returns_void:
            return VOID.model_copy(), None
        wrapper = self.create_wrapper(method_name, action, interface)
        return TypeRef.of(wrapper.name), wrapper

    def create_wrapper(self, method_name: str, action: Action, interface: InterfaceModel) -> ResponseWrapperModel:
        wrapper = ResponseWrapperModel(name=response_wrapper_name(method_name))
        for status_key, response in action.responses.items():
            if not response.has_body:
                wrapper.add_builder(self.create_builder(status_key, response, None, False))
                continue
            disambiguate = len(response.body) > 1
            for mime_type in response.body.values():
                wrapper.add_builder(self.create_builder(status_key, response, mime_type, disambiguate))
        interface.add_response_wrapper(wrapper)
        logger.debug("Synthesized %s with %d builders", wrapper.name, len(wrapper.builders))
        return wrapper

    def create_builder(
        self,
        status_key: str,
        response: Response,
        mime_type: MimeType | None,
        disambiguate: bool,
    ) -> BuilderMethodModel:
        builder = BuilderMethodModel(
            name=response_builder_method_name(status_key, mime_type if disambiguate else None),
            status_code=parse_status_code(status_key),
            status_literal=status_key,
            mime_type=mime_type.media_type if mime_type else None,
            description=describe(response.description, mime_type.example if mime_type else None),
        )

        simple: list[Attachment] = []
        if mime_type is not None:
            simple.append(
                Attachment(kind=AttachmentKind.SIMPLE, header=CONTENT_TYPE_HEADER, literal=mime_type.media_type)
            )
        loops: list[Attachment] = []
        free_form_descriptions: list[str] = []

        for header_name, header in response.headers.items():
            if RESPONSE_HEADER_WILDCARD_SYMBOL in header_name:
                free_form_descriptions.append(describe(header.description, header.example) or header_name)
                continue

            argument = variable_name(header_name)
            builder.add_parameter(
                ParameterModel(
                    name=argument,
                    type=parameter_type(header),
                    kind=ParameterKind.HEADER,
                    source_name=header_name,
                    repeated=header.repeated,
                    required=header.required,
                    default=header.default,
                    description=describe(header.description, header.example),
                )
            )
            if header.repeated:
                loops.append(Attachment(kind=AttachmentKind.REPEATED_LOOP, header=header_name, argument=argument))
            else:
                simple.append(Attachment(kind=AttachmentKind.SIMPLE, header=header_name, argument=argument))

        aggregate: list[Attachment] = []
        if free_form_descriptions:
            builder.add_parameter(
                ParameterModel(
                    name=MULTIPLE_RESPONSE_HEADERS_ARGUMENT_NAME,
                    type=FREE_FORM_HEADERS.model_copy(deep=True),
                    kind=ParameterKind.FREE_FORM,
                    description=" ".join(free_form_descriptions),
                )
            )
            aggregate.append(
                Attachment(kind=AttachmentKind.AGGREGATE, argument=MULTIPLE_RESPONSE_HEADERS_ARGUMENT_NAME)
            )

        entity: list[Attachment] = []
        if mime_type is not None:
            builder.add_parameter(
                ParameterModel(
                    name=GENERIC_PAYLOAD_ARGUMENT_NAME,
                    type=response_entity_type(mime_type, status_key),
                    kind=ParameterKind.BODY,
                    required=True,
                    description=mime_type.example or "",
                )
            )
            entity.append(Attachment(kind=AttachmentKind.ENTITY, argument=GENERIC_PAYLOAD_ARGUMENT_NAME))

        builder.attachments = simple + loops + aggregate + entity
        return builder
