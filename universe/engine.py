from __future__ import annotations

from importlib import import_module
from pathlib import Path
from typing import Any

import structlog
from fastapi import FastAPI

from universe.errors import ValidationNormalizeMiddleware
from universe.logger import setup_logging
from universe.registry import load_modules
from universe.settings import get_settings

logger = structlog.get_logger(__name__)


def import_attr(path: str) -> Any:
    if ":" not in path:
        raise ValueError(f"Invalid entrypoint '{path}'. Expected module:attr.")
    module_path, attr = path.split(":", 1)
    module = import_module(module_path)
    return getattr(module, attr)


def build_app(modules_path: Path | None = None) -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level, json=settings.log_json)

    app = FastAPI(title="Sparky Universe")
    app.add_middleware(ValidationNormalizeMiddleware)

    modules = load_modules(modules_path)

    @app.get("/healthz")
    def healthz():
        return {"status": "ok", "env": settings.env, "modules": sorted(modules)}

    for meta in modules.values():
        api_entry = (meta.get("entrypoints") or {}).get("api")
        if not api_entry:
            continue

        try:
            subapp = import_attr(api_entry)
        except (ImportError, AttributeError, ValueError):
            logger.warning("module_mount_failed", module=meta["name"], entrypoint=api_entry)
            continue

        app.mount(meta["mount"], subapp)
        logger.info("module_mounted", module=meta["name"], mount=meta["mount"])

    return app
