"""Resolve applied resource types and traits into template parameters."""

import logging

from api_interface_gen.errors import DuplicateParameterNameError, TemplateResolutionError
from api_interface_gen.generator.models import TemplateField, TemplateTypeModel
from api_interface_gen.generator.names import template_type_name, variable_name
from api_interface_gen.parser.base import Action, ApiDescription, Resource, Template, TypeRef

logger = logging.getLogger(__name__)


def flatten_templates(templates: list[dict[str, Template]]) -> dict[str, Template]:
    """Merge an ordered list of template maps; later entries win."""
    flattened: dict[str, Template] = {}
    for template_map in templates:
        flattened.update(template_map)
    return flattened


class TemplateRegistry:
    """Flattened resource types and traits, built once per run and only read after."""

    def __init__(self, resource_types: list[dict[str, Template]], traits: list[dict[str, Template]]):
        self.resource_types = flatten_templates(resource_types)
        self.traits = flatten_templates(traits)

    @classmethod
    def from_description(cls, description: ApiDescription) -> "TemplateRegistry":
        return cls(description.resource_types, description.traits)


class TemplateBindingResolver:
    """Turns the templates applied to an action into ordered, typed bindings.

    Synthesized fragment types are cached by name so that each resource type
    or trait yields exactly one type per run.
    """

    def __init__(self, registry: TemplateRegistry, ignored_traits: frozenset[str] = frozenset()):
        self.registry = registry
        # marker traits (the async trait) become a dedicated parameter when an action applies them
        self.ignored_traits = ignored_traits
        self._types: dict[tuple[str, bool], TemplateTypeModel] = {}

    @property
    def template_types(self) -> list[TemplateTypeModel]:
        return list(self._types.values())

    def applied_trait_names(self, resource: Resource, action: Action | None) -> list[str]:
        """Resource traits then action traits, duplicates dropped keeping the first."""
        names = list(resource.traits)
        if action is not None:
            names += action.traits
        return list(dict.fromkeys(names))

    def resolve(self, resource: Resource, action: Action | None = None) -> dict[str, TypeRef]:
        """Ordered mapping of parameter name to fragment type.

        The resource type comes first, then traits in application order.
        Names missing from the registry contribute nothing.
        """
        bindings: dict[str, TypeRef] = {}

        if resource.resource_type:
            template = self.registry.resource_types.get(resource.resource_type)
            if template is None:
                logger.debug("Resource type '%s' not declared, skipping", resource.resource_type)
            else:
                bindings[variable_name(resource.resource_type)] = self._fragment_type(
                    resource.resource_type, template, is_trait=False
                )

        for trait_name in self.applied_trait_names(resource, action):
            if action is not None and trait_name in self.ignored_traits and trait_name in action.traits:
                continue
            template = self.registry.traits.get(trait_name)
            if template is None:
                logger.debug("Trait '%s' not declared, skipping", trait_name)
                continue
            param_name = variable_name(trait_name)
            if param_name in bindings:
                raise DuplicateParameterNameError(
                    f"template parameter '{param_name}' bound twice", identity=trait_name
                )
            bindings[param_name] = self._fragment_type(trait_name, template, is_trait=True)

        return bindings

    def _fragment_type(self, name: str, template: Template, is_trait: bool) -> TypeRef:
        key = (name, is_trait)
        if key not in self._types:
            synthesized = self._synthesize(name, template, is_trait)
            clash = next((t for t in self._types.values() if t.name == synthesized.name), None)
            if clash is not None:
                raise TemplateResolutionError(
                    f"'{name}' and '{clash.template_name}' both resolve to type '{synthesized.name}'",
                    identity=name,
                )
            self._types[key] = synthesized
        return TypeRef.of(self._types[key].name)

    def _synthesize(self, name: str, template: Template, is_trait: bool) -> TemplateTypeModel:
        kind = "trait" if is_trait else "resource type"
        type_name = template_type_name(name, is_trait)
        if not type_name:
            raise TemplateResolutionError(f"{kind} '{name}' has no usable type name", identity=name)

        fields: list[TemplateField] = []
        for placeholder in template.parameters:
            field_name = variable_name(placeholder)
            if any(f.name == field_name for f in fields):
                raise TemplateResolutionError(
                    f"{kind} '{name}' parameters collide on '{field_name}'", identity=placeholder
                )
            fields.append(TemplateField(name=field_name, source_name=placeholder))

        return TemplateTypeModel(
            name=type_name,
            template_name=name,
            is_trait=is_trait,
            description=template.description,
            fields=fields,
        )
