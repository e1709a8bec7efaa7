import pytest

from api_interface_gen.config import GeneratorConfig
from api_interface_gen.errors import DuplicateMethodNameError, DuplicateParameterNameError
from api_interface_gen.generator.assembler import MethodSignatureAssembler
from api_interface_gen.generator.models import InterfaceModel, ParameterKind
from api_interface_gen.generator.strategies import create_strategy
from api_interface_gen.generator.templates import TemplateBindingResolver, TemplateRegistry
from api_interface_gen.parser.base import Action, MimeType, Param, Resource, Response, Template, TypeRef

JSON = MimeType(media_type="application/json", type=TypeRef.of("User"))


def _assembler(config: GeneratorConfig | None = None, traits=None, strategy: str = "service"):
    config = config or GeneratorConfig()
    registry = TemplateRegistry([], [traits or {}])
    ignored = frozenset([config.async_trait]) if config.async_trait else frozenset()
    return MethodSignatureAssembler(
        config,
        TemplateBindingResolver(registry, ignored),
        create_strategy(strategy, config.empty_response_returns_void),
    )


def _interface() -> InterfaceModel:
    return InterfaceModel(name="UsersByIdResource", namespace="generated.resource", path="{id}")


def _full_action() -> Action:
    parent = Resource(
        relative_uri="/users",
        resources=[
            Resource(
                relative_uri="/{id}",
                traits=["secured"],
                uri_parameters={"id": Param(name="id", type=TypeRef.of("int"))},
                actions=[
                    Action(
                        method="PUT",
                        description="Replace a user",
                        body={"application/json": JSON},
                        headers={
                            "If-Match": Param(name="If-Match", required=True),
                            "X-{?}": Param(name="X-{?}"),
                        },
                        query_parameters={"dryRun": Param(name="dryRun", type=TypeRef.of("bool"), default="false")},
                        traits=["async"],
                        responses={"200": Response(body={"application/json": JSON})},
                    )
                ],
            )
        ],
    )
    return parent.resources[0].actions[0]


class TestParameterOrder:
    def test_kinds_in_fixed_order(self):
        action = _full_action()
        assembler = _assembler(
            GeneratorConfig(async_trait="async"),
            traits={"secured": Template(name="secured")},
        )
        method = assembler.assemble(_interface(), action, JSON, False, action.unique_response_mime_types())
        assert [(p.name, p.kind) for p in method.parameters] == [
            ("secured", ParameterKind.TEMPLATE),
            ("id", ParameterKind.PATH),
            ("if_match", ParameterKind.HEADER),
            ("dry_run", ParameterKind.QUERY),
            ("entity", ParameterKind.BODY),
            ("async_", ParameterKind.ASYNC),
        ]

    def test_declared_parameter_details(self):
        action = _full_action()
        method = _assembler().assemble(_interface(), action, JSON, False, [])
        by_name = {p.name: p for p in method.parameters}
        assert by_name["id"].type.name == "int"
        assert by_name["id"].required is True
        assert by_name["if_match"].source_name == "If-Match"
        assert by_name["dry_run"].default == "false"
        assert by_name["entity"].type.name == "User"

    def test_wildcard_request_headers_are_skipped(self):
        action = _full_action()
        method = _assembler().assemble(_interface(), action, None, False, [])
        assert "x" not in {p.name for p in method.parameters}
        assert len(method.parameters_of(ParameterKind.HEADER)) == 1


class TestMethodMetadata:
    def test_binding_metadata(self):
        action = _full_action()
        method = _assembler(GeneratorConfig(throws_type="ApiError")).assemble(
            _interface(), action, JSON, False, action.unique_response_mime_types()
        )
        assert method.name == "put_users_by_id"
        assert method.verb == "PUT"
        assert method.path == "/users/{id}"
        assert method.consumes == ["application/json"]
        assert method.produces == ["application/json"]
        assert method.throws == "ApiError"
        assert method.description == "Replace a user"

    def test_disambiguated_name(self):
        action = _full_action()
        method = _assembler().assemble(_interface(), action, JSON, True, [])
        assert method.name == "put_users_by_id_json"

    def test_no_body_variant_means_no_consumes(self):
        action = _full_action()
        method = _assembler().assemble(_interface(), action, None, False, [])
        assert method.consumes == []
        assert method.parameters_of(ParameterKind.BODY) == []

    def test_unresolved_request_body_is_opaque_stream(self):
        action = _full_action()
        pdf = MimeType(media_type="application/pdf")
        method = _assembler().assemble(_interface(), action, pdf, False, [])
        assert method.parameters_of(ParameterKind.BODY)[0].type.name == "typing.BinaryIO"


class TestAsync:
    def test_async_method_returns_void_with_trailing_continuation(self):
        action = _full_action()
        interface = _interface()
        method = _assembler(GeneratorConfig(async_trait="async")).assemble(
            interface, action, JSON, False, action.unique_response_mime_types()
        )
        assert method.is_async is True
        assert method.return_type.name == "None"
        assert method.parameters[-1].kind == ParameterKind.ASYNC
        assert method.parameters[-1].type.name == "AsyncResponse"
        assert len(method.parameters_of(ParameterKind.ASYNC)) == 1
        assert [w.name for w in interface.response_wrappers] == ["PutUsersByIdResponse"]

    def test_async_disabled_without_configured_trait(self):
        action = _full_action()
        method = _assembler().assemble(_interface(), action, JSON, False, action.unique_response_mime_types())
        assert method.is_async is False
        assert method.parameters_of(ParameterKind.ASYNC) == []
        assert method.return_type.name == "PutUsersByIdResponse"

    def test_resource_level_async_trait_is_a_template_binding(self):
        resource = Resource(relative_uri="/users", traits=["async"], actions=[Action(method="GET")])
        action = resource.actions[0]
        assembler = _assembler(GeneratorConfig(async_trait="async"), traits={"async": Template(name="async")})
        method = assembler.assemble(_interface(), action, None, False, [])
        assert method.is_async is False
        assert [(p.name, p.kind) for p in method.parameters] == [("async_", ParameterKind.TEMPLATE)]


class TestCollisions:
    def test_headers_normalizing_to_same_name(self):
        resource = Resource(
            relative_uri="/users",
            actions=[
                Action(
                    method="GET",
                    headers={"X-Count": Param(name="X-Count"), "x-count": Param(name="x-count")},
                )
            ],
        )
        with pytest.raises(DuplicateParameterNameError):
            _assembler().assemble(_interface(), resource.actions[0], None, False, [])

    def test_header_colliding_with_body(self):
        resource = Resource(
            relative_uri="/users",
            actions=[Action(method="POST", headers={"Entity": Param(name="Entity")}, body={"application/json": JSON})],
        )
        with pytest.raises(DuplicateParameterNameError):
            _assembler().assemble(_interface(), resource.actions[0], JSON, False, [])

    def test_same_method_twice(self):
        action = _full_action()
        assembler = _assembler()
        interface = _interface()
        assembler.assemble(interface, action, JSON, False, [])
        with pytest.raises(DuplicateMethodNameError):
            assembler.assemble(interface, action, JSON, False, [])


class TestClientStrategy:
    def test_client_returns_payload_type_and_invocation(self):
        action = _full_action()
        interface = _interface()
        method = _assembler(strategy="client").assemble(
            interface, action, JSON, False, action.unique_response_mime_types()
        )
        assert method.return_type.name == "User"
        assert interface.response_wrappers == []
        assert method.invocation.verb == "PUT"
        assert method.invocation.entity_argument == "entity"
        assert method.invocation.request_mime_type == "application/json"
        assert method.invocation.expects_generic is False

    def test_client_void_without_response_bodies(self):
        action = _full_action()
        method = _assembler(strategy="client").assemble(_interface(), action, None, False, [])
        assert method.return_type.name == "None"
        assert method.invocation.expected_type is None
        assert method.invocation.entity_argument is None
