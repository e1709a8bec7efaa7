"""Extension hooks invoked while the model of a run is being built."""

from typing import Protocol, runtime_checkable

from api_interface_gen.generator.models import InterfaceModel, MethodModel
from api_interface_gen.parser.base import Action, MimeType, Resource


@runtime_checkable
class GeneratorExtension(Protocol):
    """Observer notified once a method or interface is otherwise complete.

    Callbacks may mutate the model in place. Anything they raise aborts the run.
    """

    def on_method_added(
        self,
        method: MethodModel,
        action: Action,
        body_mime_type: MimeType | None,
        response_mime_types: list[MimeType],
    ) -> None: ...

    def on_interface_created(self, interface: InterfaceModel, resource: Resource) -> None: ...


class ExtensionRegistry:
    """Ordered extension list, frozen once a run starts."""

    def __init__(self, extensions: list[GeneratorExtension] | None = None):
        self._extensions: list[GeneratorExtension] = []
        self._frozen = False
        for extension in extensions or []:
            self.register(extension)

    def __len__(self) -> int:
        return len(self._extensions)

    def register(self, extension: GeneratorExtension) -> None:
        if self._frozen:
            raise RuntimeError("Extensions must be registered before generation starts")
        if not isinstance(extension, GeneratorExtension):
            raise TypeError(f"{type(extension).__name__} does not implement GeneratorExtension")
        self._extensions.append(extension)

    def freeze(self) -> None:
        self._frozen = True

    def method_added(
        self,
        method: MethodModel,
        action: Action,
        body_mime_type: MimeType | None,
        response_mime_types: list[MimeType],
    ) -> None:
        for extension in self._extensions:
            extension.on_method_added(method, action, body_mime_type, response_mime_types)

    def interface_created(self, interface: InterfaceModel, resource: Resource) -> None:
        for extension in self._extensions:
            extension.on_interface_created(interface, resource)
