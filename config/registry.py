"""In-memory registry binding AI gateway operations to callables."""
from typing import Any, Callable, Dict

_REGISTRY: Dict[str, Callable[..., Any]] = {}


def bind_model(key: str, fn: Callable[..., Any]) -> None:
    """Bind a callable implementation to a registry key."""
    _REGISTRY[key] = fn


def get_model(key: str) -> Callable[..., Any]:
    """Retrieve a callable from the registry.

    Raises:
        KeyError: If no callable has been bound for ``key``.
    """

    if key not in _REGISTRY:
        raise KeyError(f"Model not bound in registry: {key}")
    return _REGISTRY[key]


def is_bound(key: str) -> bool:
    return key in _REGISTRY


EXTRACT_KEY = "ai_gateway.extract_profile_fields"
QUESTION_KEY = "ai_gateway.generate_question"
EVALUATE_KEY = "ai_gateway.evaluate_answer"
SUMMARY_KEY = "ai_gateway.summarize"
