"""Code generation for Lambda entry-point modules.

Each target function gets a generated wrapper class whose constructor either
builds a service container and registers the Lambda class in it, or simply
instantiates the Lambda class. A module-level attribute exposes the bound
handler so Lambda can reference it as ``<module>.<handler_name>``.
"""

import keyword
from collections.abc import Iterable
from dataclasses import dataclass

from jinja2 import BaseLoader
from jinja2.sandbox import SandboxedEnvironment

from src.logging.hosting import get_logger

logger = get_logger("codegen")

_env = SandboxedEnvironment(
    loader=BaseLoader(),
    autoescape=False,
    keep_trailing_newline=True,
    trim_blocks=True,
    lstrip_blocks=True,
)

MODULE_TEMPLATE = '''\
# <auto-generated/>
# Lambda entry points. Regenerate instead of editing by hand.
{% for line in imports %}
{{ line }}
{% endfor %}
{% for fn in functions %}


{{ render_function(fn) }}
{% endfor %}
'''

FUNCTION_TEMPLATE = '''\
class {{ fn.generated_class_name }}:
    def __init__(self):
        set_execution_environment()
{% if fn.using_dependency_injection %}
        services = ServiceCollection()
        services.add_singleton({{ fn.class_name }})
{% if fn.startup_class %}
        {{ fn.startup_class }}().configure_services(services)
{% endif %}
        self.service_provider = services.build_provider()
{% else %}
        self.{{ fn.field_name }} = {{ fn.class_name }}()
{% endif %}

    def {{ fn.method_name }}(self, event, context):
{% if fn.using_dependency_injection %}
        {{ fn.field_name }} = self.service_provider.get_required_service({{ fn.class_name }})
        return {{ fn.field_name }}.{{ fn.method_name }}(event, context)
{% else %}
        return self.{{ fn.field_name }}.{{ fn.method_name }}(event, context)
{% endif %}


{{ fn.handler_name }} = {{ fn.generated_class_name }}().{{ fn.method_name }}'''


def _check_identifier(value: str, what: str) -> None:
    if not value.isidentifier() or keyword.iskeyword(value):
        raise ValueError(f"Invalid {what}: {value!r}")


def _check_module(value: str, what: str) -> None:
    if not value:
        raise ValueError(f"Invalid {what}: {value!r}")
    for part in value.split("."):
        _check_identifier(part, what)


def _snake(name: str) -> str:
    out = []
    for i, ch in enumerate(name):
        if ch.isupper() and i and not name[i - 1].isupper():
            out.append("_")
        out.append(ch.lower())
    return "".join(out)


@dataclass(frozen=True)
class LambdaFunctionModel:
    """One Lambda function: ``<module>.<class_name>.<method_name>``."""

    module: str
    class_name: str
    method_name: str
    using_dependency_injection: bool = False
    startup_module: str | None = None
    startup_class: str | None = None
    handler_name: str | None = None

    def __post_init__(self):
        _check_module(self.module, "module")
        _check_identifier(self.class_name, "class name")
        _check_identifier(self.method_name, "method name")
        if self.handler_name is not None:
            _check_identifier(self.handler_name, "handler name")
        if self.startup_class is not None:
            _check_identifier(self.startup_class, "startup class")
            _check_module(self.startup_module or "", "startup module")

    @property
    def generated_class_name(self) -> str:
        return f"{self.class_name}_{self.method_name}_Generated"

    @property
    def field_name(self) -> str:
        return _snake(self.class_name)

    @property
    def resolved_handler_name(self) -> str:
        return self.handler_name or f"{_snake(self.class_name)}_{self.method_name}"


def _local_names(functions: list[LambdaFunctionModel]) -> dict[tuple[str, str], str]:
    """Name each imported class is bound to in the generated module.

    A class name imported from more than one module is aliased with its
    module path, e.g. ``app.a:Functions`` -> ``app_a_Functions``.
    """
    refs: list[tuple[str, str]] = []
    for fn in functions:
        refs.append((fn.module, fn.class_name))
        if fn.using_dependency_injection and fn.startup_class:
            refs.append((fn.startup_module, fn.startup_class))

    modules_by_name: dict[str, set[str]] = {}
    for module, name in refs:
        modules_by_name.setdefault(name, set()).add(module)

    names = {}
    for module, name in refs:
        if len(modules_by_name[name]) > 1:
            names[(module, name)] = f"{module.replace('.', '_')}_{name}"
        else:
            names[(module, name)] = name
    return names


def _imports(functions: list[LambdaFunctionModel], local_names: dict[tuple[str, str], str]) -> list[str]:
    lines: list[str] = []

    def add(line: str) -> None:
        if line not in lines:
            lines.append(line)

    add("from src.hosting.environment import set_execution_environment")
    if any(fn.using_dependency_injection for fn in functions):
        add("from src.hosting.services import ServiceCollection")
    for (module, name), local in local_names.items():
        add(f"from {module} import {name}" if local == name else f"from {module} import {name} as {local}")
    return lines


def render_function(fn: LambdaFunctionModel, local_names: dict[tuple[str, str], str] | None = None) -> str:
    """Render the wrapper class and handler attribute for one function."""
    template = _env.from_string(FUNCTION_TEMPLATE)
    return template.render(fn=_FunctionView(fn, local_names or {}))


def render_module(functions: Iterable[LambdaFunctionModel]) -> str:
    """Render a complete entry-point module for the given functions."""
    functions = list(functions)
    if not functions:
        raise ValueError("At least one Lambda function is required")

    handler_names = [fn.resolved_handler_name for fn in functions]
    duplicates = sorted({name for name in handler_names if handler_names.count(name) > 1})
    if duplicates:
        raise ValueError(f"Duplicate handler names: {', '.join(duplicates)}")

    local_names = _local_names(functions)
    template = _env.from_string(MODULE_TEMPLATE)
    source = template.render(
        imports=_imports(functions, local_names),
        functions=functions,
        render_function=lambda fn: render_function(fn, local_names),
    )
    logger.debug("Rendered entry-point module for %d function(s)", len(functions))
    return source


class _FunctionView:
    """Template-facing view; exposes resolved names as plain attributes."""

    def __init__(self, fn: LambdaFunctionModel, local_names: dict[tuple[str, str], str]):
        self.class_name = local_names.get((fn.module, fn.class_name), fn.class_name)
        self.method_name = fn.method_name
        self.using_dependency_injection = fn.using_dependency_injection
        self.startup_class = None
        if fn.startup_class:
            self.startup_class = local_names.get((fn.startup_module, fn.startup_class), fn.startup_class)
        self.generated_class_name = f"{self.class_name}_{fn.method_name}_Generated"
        self.field_name = fn.field_name
        self.handler_name = fn.resolved_handler_name
