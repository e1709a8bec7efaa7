"""Python source emitter for synthesized interface models.

Renders one module per interface plus a module holding the template fragment
types. The emitter only reads the models.
"""

from api_interface_gen.config import GeneratorConfig
from api_interface_gen.generator.models import (
    VOID,
    AttachmentKind,
    BuilderMethodModel,
    GenerationResult,
    InterfaceModel,
    MethodModel,
    ParameterKind,
    ParameterModel,
    ResponseWrapperModel,
    TemplateTypeModel,
)
from api_interface_gen.generator.names import split_words
from api_interface_gen.parser.base import TypeRef

BUILTIN_TYPES = {"str", "int", "float", "bool", "bytes", "list", "dict", "object", "None"}
RUNTIME_TYPES = {"AsyncResponse", "Response", "ResponseWrapper"}
INDENT = "    "

PARAMETER_BINDINGS = {
    ParameterKind.PATH: "PathParam",
    ParameterKind.HEADER: "HeaderParam",
    ParameterKind.QUERY: "QueryParam",
}


def module_name(interface_name: str) -> str:
    return "_".join(split_words(interface_name))


def binding_path(interface: InterfaceModel) -> str:
    """Path an emitted interface is bound to: the full resource path, slashes stripped."""
    return interface.resource_path.strip("/") or "/"


def _docstring(lines: list[str], indent: str) -> list[str]:
    lines = [l.replace("\\", "\\\\").replace('"', '\\"') for l in lines if l]
    if not lines:
        return []
    if len(lines) == 1:
        return [f'{indent}"""{lines[0]}"""']
    return [f'{indent}"""{lines[0]}', ""] + [f"{indent}{l}" for l in lines[1:]] + [f'{indent}"""']


class PythonEmitter:
    """Turns a GenerationResult into ``{relative file path: source}``."""

    def __init__(self, config: GeneratorConfig):
        self.config = config

    def emit(self, result: GenerationResult) -> dict[str, str]:
        files: dict[str, str] = {}
        template_names = {t.name for t in result.template_types}
        if result.template_types:
            files[self._path(self._templates_module()) + ".py"] = self._render_templates(result.template_types)
        for interface in result.interfaces:
            file_path = self._path(interface.namespace) + "/" + module_name(interface.name) + ".py"
            if result.strategy == "client":
                files[file_path] = self._render_client(interface, template_names)
            else:
                files[file_path] = self._render_service(interface, template_names)
        return files

    # -- shared helpers -------------------------------------------------------

    def _path(self, module: str) -> str:
        return module.replace(".", "/")

    def _templates_module(self) -> str:
        return f"{self.config.base_package}.templates"

    def _model_module(self) -> str:
        return f"{self.config.base_package}.model"

    def _collect_names(self, type_ref: TypeRef, names: set[str]) -> None:
        names.add(type_ref.name)
        for arg in type_ref.args:
            self._collect_names(arg, names)

    def _render_imports(self, interface: InterfaceModel, template_names: set[str], runtime: set[str]) -> list[str]:
        names: set[str] = set()
        for method in interface.methods:
            self._collect_names(method.return_type, names)
            for param in method.parameters:
                self._collect_names(param.type, names)
        for wrapper in interface.response_wrappers:
            for builder in wrapper.builders:
                for param in builder.parameters:
                    self._collect_names(param.type, names)
        wrapper_names = {w.name for w in interface.response_wrappers}

        modules = {"typing"} | {n.rsplit(".", 1)[0] for n in names if "." in n}
        runtime = runtime | (names & RUNTIME_TYPES)
        templates = sorted(names & template_names)
        models = sorted(
            n for n in names
            if "." not in n and n not in BUILTIN_TYPES | RUNTIME_TYPES | template_names | wrapper_names
        )

        lines = [f"import {m}" for m in sorted(modules)]
        lines.append("")
        lines.append(f"from {self.config.runtime_module} import {', '.join(sorted(runtime))}")
        if models:
            lines.append(f"from {self._model_module()} import {', '.join(models)}")
        if templates:
            lines.append(f"from {self._templates_module()} import {', '.join(templates)}")
        return lines

    def _annotation(self, param: ParameterModel, bind: bool) -> str:
        rendered = param.type.render()
        binding = PARAMETER_BINDINGS.get(param.kind) if bind else None
        if binding is not None:
            rendered = f"typing.Annotated[{rendered}, {binding}({param.source_name!r})]"
        elif bind and param.kind == ParameterKind.ASYNC:
            rendered = f"typing.Annotated[{rendered}, Suspended()]"
        if not param.required and param.kind != ParameterKind.TEMPLATE:
            return f"{rendered} | None = None"
        return rendered

    def _signature(self, first: str, parameters: list[ParameterModel], bind: bool = True) -> str:
        args = [first]
        if parameters:
            args.append("*")
            args.extend(f"{p.name}: {self._annotation(p, bind)}" for p in parameters)
        return ", ".join(args)

    def _param_docs(self, parameters: list[ParameterModel]) -> list[str]:
        docs = []
        for param in parameters:
            text = param.description
            if param.default is not None:
                text = f"{text} (default: {param.default})".strip()
            if text:
                docs.append(f":param {param.name}: {text}")
        return docs

    # -- service interfaces ---------------------------------------------------

    def _render_service(self, interface: InterfaceModel, template_names: set[str]) -> str:
        runtime = {"http_method", "path"}
        if any(m.consumes for m in interface.methods):
            runtime.add("consumes")
        if any(m.produces for m in interface.methods):
            runtime.add("produces")
        if any(m.throws for m in interface.methods):
            runtime.add("throws")
        if any(m.parameters_of(ParameterKind.ASYNC) for m in interface.methods):
            runtime.add("Suspended")
        for kind, binding in PARAMETER_BINDINGS.items():
            if any(m.parameters_of(kind) for m in interface.methods):
                runtime.add(binding)
        if interface.response_wrappers:
            runtime |= {"Response", "ResponseWrapper"}

        lines = self._render_imports(interface, template_names, runtime)
        lines += ["", "", f"@path({binding_path(interface)!r})", f"class {interface.name}(typing.Protocol):"]
        body = _docstring([interface.description], INDENT)
        for wrapper in interface.response_wrappers:
            body += [""] + self._render_wrapper(interface, wrapper)
        for method in interface.methods:
            body += [""] + self._render_service_method(interface, method)
        lines += body or [f"{INDENT}pass"]
        return "\n".join(lines) + "\n"

    def _render_service_method(self, interface: InterfaceModel, method: MethodModel) -> list[str]:
        lines = [f"{INDENT}@http_method({method.verb!r})"]
        if method.consumes:
            lines.append(f"{INDENT}@consumes({', '.join(repr(c) for c in method.consumes)})")
        if method.produces:
            lines.append(f"{INDENT}@produces({', '.join(repr(p) for p in method.produces)})")
        if method.throws:
            lines.append(f"{INDENT}@throws({method.throws!r})")
        returns = method.return_type.render()
        if method.response_wrapper and method.return_type.name == method.response_wrapper:
            returns = repr(f"{interface.name}.{method.response_wrapper}")
        lines.append(f"{INDENT}def {method.name}({self._signature('self', method.parameters)}) -> {returns}:")
        lines += _docstring([method.description] + self._param_docs(method.parameters), INDENT * 2)
        lines.append(f"{INDENT * 2}...")
        return lines

    def _render_wrapper(self, interface: InterfaceModel, wrapper: ResponseWrapperModel) -> list[str]:
        qualified = repr(f"{interface.name}.{wrapper.name}")
        lines = [
            f"{INDENT}class {wrapper.name}(ResponseWrapper):",
            f"{INDENT * 2}def __init__(self, {wrapper.delegate_argument}: Response):",
            f"{INDENT * 3}super().__init__({wrapper.delegate_argument})",
        ]
        for builder in wrapper.builders:
            lines += [""] + self._render_builder(builder, qualified)
        return lines

    def _render_builder(self, builder: BuilderMethodModel, qualified: str) -> list[str]:
        pad = INDENT * 3
        lines = [
            f"{INDENT * 2}@classmethod",
            f"{INDENT * 2}def {builder.name}({self._signature('cls', builder.parameters, bind=False)}) -> {qualified}:",
        ]
        lines += _docstring([builder.description] + self._param_docs(builder.parameters), pad)

        status = str(builder.status_code) if builder.status_literal.strip().isdigit() else repr(builder.status_literal)
        expression = f"Response.status({status})"
        statements = []
        for attachment in builder.attachments:
            if attachment.kind == AttachmentKind.SIMPLE:
                value = repr(attachment.literal) if attachment.literal is not None else attachment.argument
                expression += f".header({attachment.header!r}, {value})"
            elif attachment.kind == AttachmentKind.REPEATED_LOOP:
                statements += [
                    f"{pad}for h in {attachment.argument}:",
                    f"{pad}{INDENT}response_builder.header({attachment.header!r}, h)",
                ]
            elif attachment.kind == AttachmentKind.AGGREGATE:
                statements.append(f"{pad}response_builder.headers({attachment.argument})")
            else:
                statements.append(f"{pad}response_builder.entity({attachment.argument})")

        lines.append(f"{pad}response_builder = {expression}")
        lines += statements
        lines.append(f"{pad}return cls(response_builder.build())")
        return lines

    # -- client proxies -------------------------------------------------------

    def _render_client(self, interface: InterfaceModel, template_names: set[str]) -> str:
        runtime = {"Client"}
        for kind, binding in PARAMETER_BINDINGS.items():
            if any(m.parameters_of(kind) for m in interface.methods):
                runtime.add(binding)
        if any(m.parameters_of(ParameterKind.ASYNC) for m in interface.methods):
            runtime.add("Suspended")
        if any(m.invocation and m.invocation.entity_argument for m in interface.methods):
            runtime.add("Entity")
        if any(m.invocation and m.invocation.expects_generic for m in interface.methods):
            runtime.add("GenericType")

        lines = self._render_imports(interface, template_names, runtime)
        lines += ["", "", f"class {interface.name}:"]
        lines += _docstring([interface.description], INDENT)
        lines += [
            "",
            f"{INDENT}PATH = {binding_path(interface)!r}",
            "",
            f"{INDENT}def __init__(self, client: Client, base_url: str):",
            f"{INDENT * 2}self._client = client",
            f"{INDENT * 2}self._base_url = base_url",
            "",
            f"{INDENT}def _create_request_target(self):",
            f"{INDENT * 2}return self._client.target(self._base_url).path(self.PATH)",
        ]
        for method in interface.methods:
            lines += [""] + self._render_client_method(method)
        return "\n".join(lines) + "\n"

    def _render_client_method(self, method: MethodModel) -> list[str]:
        lines = [f"{INDENT}def {method.name}({self._signature('self', method.parameters)}) -> {method.return_type.render()}:"]
        lines += _docstring([method.description] + self._param_docs(method.parameters), INDENT * 2)

        pad = INDENT * 2
        lines.append(f"{pad}_target = self._create_request_target()")
        for param in method.parameters_of(ParameterKind.PATH):
            lines.append(f"{pad}_target = _target.resolve_template({param.source_name!r}, {param.name})")
        for param in method.parameters_of(ParameterKind.QUERY):
            value = f"*{param.name}" if param.repeated else param.name
            lines += self._guarded(param, f"_target = _target.query_param({param.source_name!r}, {value})")
        lines.append(f"{pad}_request = _target.request()")
        for param in method.parameters_of(ParameterKind.HEADER):
            if param.repeated:
                lines += self._guarded(
                    param,
                    f"for _value in {param.name}:",
                    f"{INDENT}_request = _request.header({param.source_name!r}, _value)",
                )
            else:
                lines += self._guarded(param, f"_request = _request.header({param.source_name!r}, {param.name})")

        invocation = method.invocation
        args = []
        if invocation.entity_argument:
            args.append(f"Entity.entity({invocation.entity_argument}, {invocation.request_mime_type!r})")
        if invocation.expected_type is not None:
            expected = invocation.expected_type.render()
            args.append(f"GenericType({expected})" if invocation.expects_generic else expected)
        call = f"_request.{invocation.verb.lower()}({', '.join(args)})"
        if method.return_type.name == VOID.name:
            lines.append(f"{pad}{call}")
        else:
            lines.append(f"{pad}return {call}")
        return lines

    def _guarded(self, param: ParameterModel, *statements: str) -> list[str]:
        """Client statements for one argument; optional arguments are skipped when None."""
        pad = INDENT * 2
        if param.required:
            return [f"{pad}{s}" for s in statements]
        return [f"{pad}if {param.name} is not None:"] + [f"{pad}{INDENT}{s}" for s in statements]

    # -- template fragment types ----------------------------------------------

    def _render_templates(self, template_types: list[TemplateTypeModel]) -> str:
        lines = ["import dataclasses"]
        for template in template_types:
            lines += ["", "", "@dataclasses.dataclass", f"class {template.name}:"]
            kind = "Trait" if template.is_trait else "Resource type"
            body = _docstring([template.description or f"{kind} '{template.template_name}'."], INDENT)
            body += [f"{INDENT}{f.name}: str | None = None" for f in template.fields]
            lines += body
        return "\n".join(lines) + "\n"
