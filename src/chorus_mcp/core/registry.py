from __future__ import annotations

import importlib
import inspect
import logging
import pkgutil
from types import ModuleType
from typing import Callable, Iterable, List, Set, get_type_hints

from .client import ChorusClient
from .prompts import PROMPTS
from .resources import RESOURCE_MIME_TYPE, RESOURCES

log = logging.getLogger("chorus_mcp.core.registry")

TOOL_NAME_PREFIX = "chorus_"


# --- Discovery helpers ----------------------------------------------------- #


def discover_tool_modules(
    package_name: str = "chorus_mcp.core.tools",
) -> List[ModuleType]:
    """Import all public modules under the given tools package, skipping failures."""
    modules: List[ModuleType] = []
    base_pkg = importlib.import_module(package_name)

    for finder in pkgutil.iter_modules(base_pkg.__path__, base_pkg.__name__ + "."):
        name = finder.name
        if name.rsplit(".", 1)[-1].startswith("_"):
            continue
        try:
            module = importlib.import_module(name)
            modules.append(module)
        except Exception as exc:  # pragma: no cover - logged, not fatal
            log.error("Failed importing tool module %s: %s", name, exc)
            continue

    return modules


def iter_tool_functions(module: ModuleType) -> Iterable[Callable]:
    """Yield functions that satisfy the tool convention."""
    for _, func in inspect.getmembers(module, inspect.iscoroutinefunction):
        if func.__name__.startswith("_"):
            continue
        if func.__module__ != module.__name__:
            # Skip imported functions
            continue

        sig = inspect.signature(func)
        params = list(sig.parameters.values())
        if not params or params[0].name != "client":
            log.debug(
                "Skipping %s.%s: first parameter must be 'client'",
                module.__name__,
                func.__name__,
            )
            continue

        yield func


# --- Wrapping / registration ---------------------------------------------- #


def _wrap_tool(func: Callable, client_provider: Callable[[], ChorusClient]) -> Callable:
    """Return a wrapper that injects client and hides it from the signature."""
    original_sig = inspect.signature(func)
    type_hints = get_type_hints(func)

    new_params = []
    for i, (name, param) in enumerate(original_sig.parameters.items()):
        if i == 0 and name == "client":
            continue  # drop injected client
        ann = type_hints.get(name, param.annotation)
        new_params.append(param.replace(annotation=ann))

    return_ann = type_hints.get("return", original_sig.return_annotation)
    new_sig = inspect.Signature(parameters=new_params, return_annotation=return_ann)

    async def wrapped(*args, **kwargs):
        client = client_provider()
        return await func(client, *args, **kwargs)

    wrapped.__name__ = func.__name__
    wrapped.__doc__ = func.__doc__
    wrapped.__module__ = func.__module__
    wrapped.__signature__ = new_sig  # type: ignore[attr-defined]
    return wrapped


def register_discovered_tools(
    app,
    client_provider: Callable[[], ChorusClient] | ChorusClient,
    modules: List[ModuleType] | None = None,
    *,
    prefix: str = TOOL_NAME_PREFIX,
) -> List[str]:
    """Register discovered tools on an app that exposes a .tool decorator."""
    if isinstance(client_provider, ChorusClient):
        _client = client_provider

        def client_provider():
            return _client

    if not hasattr(app, "tool"):
        raise TypeError("app must expose a 'tool' decorator")

    modules = modules or discover_tool_modules()
    seen_names: Set[str] = set()
    registered: List[str] = []

    for module in modules:
        for func in iter_tool_functions(module):
            name = prefix + func.__name__
            if name in seen_names:
                raise ValueError(f"Duplicate tool name detected: {name}")

            wrapped = _wrap_tool(func, client_provider)
            annotations = getattr(func, "tool_annotations", None)
            if annotations is not None:
                app.tool(name=name, annotations=annotations)(wrapped)
            else:
                app.tool(name=name)(wrapped)
            seen_names.add(name)
            registered.append(name)
            log.info("Registered tool: %s (%s)", name, module.__name__)

    return registered


def register_prompts(app, prompts: Iterable[Callable] | None = None) -> List[str]:
    """Register prompt templates on an app that exposes a .prompt decorator."""
    if prompts is None:
        prompts = PROMPTS

    registered: List[str] = []
    for func in prompts:
        description = getattr(func, "prompt_description", None) or func.__doc__
        app.prompt(name=func.__name__, description=description)(func)
        registered.append(func.__name__)
        log.info("Registered prompt: %s", func.__name__)
    return registered


def register_resources(
    app,
    client_provider: Callable[[], ChorusClient] | ChorusClient,
    readers: Iterable[Callable] | None = None,
) -> List[str]:
    """Register resource readers on an app that exposes a .resource decorator."""
    if isinstance(client_provider, ChorusClient):
        _client = client_provider

        def client_provider():
            return _client

    if readers is None:
        readers = RESOURCES

    registered: List[str] = []
    for func in readers:
        uri = func.resource_uri
        app.resource(
            uri,
            name=func.resource_name,
            description=func.resource_description,
            mime_type=RESOURCE_MIME_TYPE,
        )(_wrap_tool(func, client_provider))
        registered.append(uri)
        log.info("Registered resource: %s (%s)", func.resource_name, uri)
    return registered


__all__ = [
    "TOOL_NAME_PREFIX",
    "discover_tool_modules",
    "iter_tool_functions",
    "register_discovered_tools",
    "register_prompts",
    "register_resources",
]
