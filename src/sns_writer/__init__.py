from importlib import import_module
from typing import Any

__all__ = [
    "ConditionModel",
    "compose_generation_prompt",
    "GatewaySettings",
    "GenerationGateway",
    "GenerationResult",
    "create_app",
]


def __getattr__(name: str) -> Any:
    if name == "ConditionModel":
        module = import_module(".conditions", __name__)
        return getattr(module, name)
    if name == "compose_generation_prompt":
        module = import_module(".prompt_builder", __name__)
        return getattr(module, name)
    if name == "GatewaySettings":
        module = import_module(".settings", __name__)
        return getattr(module, name)
    if name in {"GenerationGateway", "GenerationResult"}:
        module = import_module(".gateway", __name__)
        return getattr(module, name)
    if name == "create_app":
        module = import_module(".api", __name__)
        return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
