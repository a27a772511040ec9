"""Configuration package for the interview assistant services."""
from .llm import AppConfig, LlmRoute, load_app_registry, load_config, resolve_registry
from .registry import EVALUATE_KEY, EXTRACT_KEY, QUESTION_KEY, SUMMARY_KEY, bind_model, get_model, is_bound
from .settings import Settings, settings

__all__ = [
    "AppConfig",
    "LlmRoute",
    "load_app_registry",
    "load_config",
    "resolve_registry",
    "EXTRACT_KEY",
    "QUESTION_KEY",
    "EVALUATE_KEY",
    "SUMMARY_KEY",
    "bind_model",
    "get_model",
    "is_bound",
    "Settings",
    "settings",
]
