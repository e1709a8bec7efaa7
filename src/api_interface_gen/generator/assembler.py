"""Assemble one method model per (action, request body variant) pair."""

import logging

from api_interface_gen.config import GeneratorConfig
from api_interface_gen.errors import DuplicateMethodNameError
from api_interface_gen.generator.models import (
    OPAQUE_STREAM,
    InterfaceModel,
    MethodModel,
    ParameterKind,
    ParameterModel,
)
from api_interface_gen.generator.names import (
    GENERIC_PAYLOAD_ARGUMENT_NAME,
    RESPONSE_HEADER_WILDCARD_SYMBOL,
    method_name,
    variable_name,
)
from api_interface_gen.generator.responses import describe, parameter_type
from api_interface_gen.generator.templates import TemplateBindingResolver
from api_interface_gen.parser.base import Action, MimeType, Param, TypeRef

logger = logging.getLogger(__name__)

ASYNC_RESPONSE_TYPE = TypeRef(name="AsyncResponse")


def request_entity_type(mime_type: MimeType) -> TypeRef:
    """Resolved request body type; unresolved bodies are passed as a raw stream."""
    if mime_type.type is None:
        return OPAQUE_STREAM.model_copy()
    return mime_type.type.model_copy(deep=True)


class MethodSignatureAssembler:
    """Builds method models in a fixed parameter order.

    Template, path, header, query, body and async parameters are appended in
    that order; every append rejects a name already used on the method.
    """

    def __init__(self, config: GeneratorConfig, templates: TemplateBindingResolver, strategy):
        self.config = config
        self.templates = templates
        self.strategy = strategy

    def is_async(self, action: Action) -> bool:
        return bool(self.config.async_trait) and self.config.async_trait in action.traits

    def assemble(
        self,
        interface: InterfaceModel,
        action: Action,
        body_mime_type: MimeType | None,
        disambiguate: bool,
        response_mime_types: list[MimeType],
    ) -> MethodModel:
        resource = action.resource
        name = method_name(action, body_mime_type if disambiguate else None)
        if interface.has_method(name):
            raise DuplicateMethodNameError(f"method '{name}' already declared on '{interface.name}'", identity=name)

        is_async = self.is_async(action)
        return_type, wrapper = self.strategy.return_type(
            name, action, not response_mime_types, is_async, interface
        )

        method = MethodModel(
            name=name,
            return_type=return_type,
            response_wrapper=wrapper.name if wrapper is not None else None,
            verb=action.method.upper(),
            path=resource.full_path if resource is not None else "/",
            throws=self.config.throws_type,
            is_async=is_async,
            description=action.description.strip(),
            consumes=[body_mime_type.media_type] if body_mime_type is not None else [],
            produces=[m.media_type for m in response_mime_types],
        )

        if resource is not None:
            for param_name, fragment_type in self.templates.resolve(resource, action).items():
                method.add_parameter(ParameterModel(name=param_name, type=fragment_type, kind=ParameterKind.TEMPLATE))
            for param in resource.path_parameters():
                method.add_parameter(self._declared(param, ParameterKind.PATH))

        for header_name, param in action.headers.items():
            if RESPONSE_HEADER_WILDCARD_SYMBOL in header_name:
                continue
            method.add_parameter(self._declared(param, ParameterKind.HEADER, header_name))

        for query_name, param in action.query_parameters.items():
            method.add_parameter(self._declared(param, ParameterKind.QUERY, query_name))

        if body_mime_type is not None:
            method.add_parameter(
                ParameterModel(
                    name=GENERIC_PAYLOAD_ARGUMENT_NAME,
                    type=request_entity_type(body_mime_type),
                    kind=ParameterKind.BODY,
                    source_name=body_mime_type.media_type,
                    required=True,
                    description=body_mime_type.example or "",
                )
            )

        if is_async:
            method.add_parameter(
                ParameterModel(
                    name=variable_name(self.config.async_trait),
                    type=ASYNC_RESPONSE_TYPE.model_copy(),
                    kind=ParameterKind.ASYNC,
                    source_name=self.config.async_trait,
                    required=True,
                    description=self.config.async_trait,
                )
            )

        self.strategy.realize(method, action, body_mime_type, response_mime_types)
        interface.add_method(method)
        logger.debug("Assembled %s.%s(%d params)", interface.name, method.name, len(method.parameters))
        return method

    def _declared(self, param: Param, kind: ParameterKind, source_name: str | None = None) -> ParameterModel:
        source = source_name or param.name
        return ParameterModel(
            name=variable_name(source),
            type=parameter_type(param),
            kind=kind,
            source_name=source,
            repeated=param.repeated,
            required=param.required or kind == ParameterKind.PATH,
            default=param.default,
            description=describe(param.description, param.example),
        )
