from __future__ import annotations  # FastAPI server exposing the interview assistant

import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ai_gateway import SCHEMAS, bind_from_config
from api.routes import router
from config import is_bound
from config.settings import settings


logger = logging.getLogger(__name__)

ROOT = Path(__file__).resolve().parent


def _config_path() -> Path:  # Resolve LLM config relative to the project root
    path = Path(settings.LLM_CONFIG_PATH)
    return path if path.is_absolute() else ROOT / path


def _bind_ai_operations() -> None:  # Bind gateway operations not bound by the caller
    if all(is_bound(key) for key in SCHEMAS):
        return
    try:
        bind_from_config(_config_path())
    except FileNotFoundError:
        logger.warning("LLM config not found at %s; AI endpoints will return 503", _config_path())
    except Exception as exc:  # noqa: BLE001
        logger.warning("Failed to load LLM config: %s", exc)


_bind_ai_operations()

app = FastAPI(title="Interview Assistant API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins(),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"]
)
app.include_router(router)
