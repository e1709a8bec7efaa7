"""Traversal driver: walks the resource tree and builds the interface models."""

import logging

from api_interface_gen.config import GeneratorConfig
from api_interface_gen.errors import DuplicateInterfaceNameError, GenerationError
from api_interface_gen.generator.assembler import MethodSignatureAssembler
from api_interface_gen.generator.extensions import ExtensionRegistry, GeneratorExtension
from api_interface_gen.generator.models import GenerationResult, InterfaceModel
from api_interface_gen.generator.names import interface_name
from api_interface_gen.generator.strategies import create_strategy
from api_interface_gen.generator.templates import TemplateBindingResolver, TemplateRegistry
from api_interface_gen.parser.base import Action, ApiDescription, Resource

logger = logging.getLogger(__name__)


class InterfaceGenerator:
    """Runs one strategy over an API description.

    Resources are visited depth first, a resource's interface before its
    children's. Each call to ``generate`` is an independent run.
    """

    def __init__(
        self,
        config: GeneratorConfig | None = None,
        strategy: str = "service",
        extensions: list[GeneratorExtension] | None = None,
    ):
        self.config = config or GeneratorConfig()
        self.strategy_name = strategy
        self.extensions = ExtensionRegistry(extensions)

    def generate(self, description: ApiDescription) -> GenerationResult:
        self.extensions.freeze()
        strategy = create_strategy(self.strategy_name, self.config.empty_response_returns_void)
        ignored = frozenset([self.config.async_trait]) if self.config.async_trait else frozenset()
        templates = TemplateBindingResolver(TemplateRegistry.from_description(description), ignored)
        assembler = MethodSignatureAssembler(self.config, templates, strategy)

        result = GenerationResult(strategy=self.strategy_name)
        for resource in description.resources:
            self._visit(resource, assembler, result)
        result.template_types = templates.template_types

        logger.info(
            "Generated %d interfaces with %d methods (%s)",
            len(result.interfaces),
            sum(len(i.methods) for i in result.interfaces),
            self.strategy_name,
        )
        return result

    def _visit(self, resource: Resource, assembler: MethodSignatureAssembler, result: GenerationResult) -> None:
        try:
            interface = self._create_interface(resource, assembler, result)
        except GenerationError as e:
            e.add_context(resource_path=resource.full_path)
            raise
        result.interfaces.append(interface)

        for child in resource.resources:
            self._visit(child, assembler, result)

    def _create_interface(
        self, resource: Resource, assembler: MethodSignatureAssembler, result: GenerationResult
    ) -> InterfaceModel:
        name = interface_name(resource)
        if any(i.name == name for i in result.interfaces):
            raise DuplicateInterfaceNameError(f"interface '{name}' already generated", identity=name)

        interface = InterfaceModel(
            name=name,
            namespace=self.config.namespace(self.strategy_name),
            path=resource.relative_uri.strip("/") or "/",
            resource_path=resource.full_path,
            description=resource.description.strip(),
        )
        logger.debug("Creating %s for %s", name, resource.full_path)

        for action in resource.actions:
            try:
                self._add_methods(interface, action, assembler)
            except GenerationError as e:
                e.add_context(resource_path=resource.full_path, verb=action.method)
                raise

        self.extensions.interface_created(interface, resource)
        interface.check_method_names()
        return interface

    def _add_methods(self, interface: InterfaceModel, action: Action, assembler: MethodSignatureAssembler) -> None:
        response_mime_types = action.unique_response_mime_types()
        body_variants = list(action.body.values()) or [None]
        disambiguate = len(body_variants) > 1

        for body_mime_type in body_variants:
            method = assembler.assemble(interface, action, body_mime_type, disambiguate, response_mime_types)
            self.extensions.method_added(method, action, body_mime_type, response_mime_types)
            method.check_parameter_names()
