"""Generation strategies sharing the traversal driver.

They differ only in the method return shape and in how a finished method's
behaviour is realized.
"""

from api_interface_gen.generator.models import (
    VOID,
    ClientInvocation,
    InterfaceModel,
    MethodModel,
    ParameterKind,
    ResponseWrapperModel,
)
from api_interface_gen.generator.responses import ResponseTypeSynthesizer, response_entity_type
from api_interface_gen.parser.base import Action, MimeType, TypeRef


class ServiceInterfaceStrategy:
    """Annotated signatures only; the implementation lives outside the generated code."""

    name = "service"

    def __init__(self, synthesizer: ResponseTypeSynthesizer):
        self.synthesizer = synthesizer

    def return_type(
        self,
        method_name: str,
        action: Action,
        returns_void: bool,
        is_async: bool,
        interface: InterfaceModel,
    ) -> tuple[TypeRef, ResponseWrapperModel | None]:
        return self.synthesizer.return_type(method_name, action, returns_void, is_async, interface)

    def realize(
        self,
        method: MethodModel,
        action: Action,
        body_mime_type: MimeType | None,
        response_mime_types: list[MimeType],
    ) -> None:
        method.invocation = None


class ClientProxyStrategy:
    """Methods issue a request against a stored base target.

    Response wrappers are never synthesized: a method returns nothing or the
    payload type of the first response body variant.
    """

    name = "client"

    def return_type(
        self,
        method_name: str,
        action: Action,
        returns_void: bool,
        is_async: bool,
        interface: InterfaceModel,
    ) -> tuple[TypeRef, ResponseWrapperModel | None]:
        if is_async or returns_void:
            return VOID.model_copy(), None
        return response_entity_type(action.unique_response_mime_types()[0]), None

    def realize(
        self,
        method: MethodModel,
        action: Action,
        body_mime_type: MimeType | None,
        response_mime_types: list[MimeType],
    ) -> None:
        body = method.parameters_of(ParameterKind.BODY)
        method.invocation = ClientInvocation(
            verb=method.verb,
            entity_argument=body[0].name if body else None,
            request_mime_type=body_mime_type.media_type if body_mime_type is not None else None,
            expected_type=None if method.return_type.name == VOID.name else method.return_type,
        )


def create_strategy(name: str, empty_response_returns_void: bool = False):
    if name == ServiceInterfaceStrategy.name:
        return ServiceInterfaceStrategy(ResponseTypeSynthesizer(empty_response_returns_void))
    if name == ClientProxyStrategy.name:
        return ClientProxyStrategy()
    raise ValueError(f"Unknown generation strategy: {name}")
