from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import structlog
import yaml

from universe.settings import get_settings

logger = structlog.get_logger(__name__)

MANIFEST_NAME = "module.yaml"


def normalize_mount(name: str, raw: str | None) -> str:
    mount = raw or f"/{name.replace('_', '-')}"
    if not mount.startswith("/"):
        mount = "/" + mount
    if mount != "/" and mount.endswith("/"):
        mount = mount.rstrip("/")
    return mount


def _normalize_module(data: Dict[str, Any], *, path: Path) -> Dict[str, Any] | None:
    name = data.get("name")
    if not name:
        logger.warning("module_manifest_unnamed", path=str(path))
        return None

    slug = data.get("slug") or name.replace("_", "-")
    public = data.get("public")

    normalized = {**data}
    normalized.update(
        {
            "name": name,
            "slug": slug,
            "mount": normalize_mount(slug, data.get("mount")),
            "public": True if public is None else bool(public),
            "path": path,
        }
    )
    return normalized


def load_modules(modules_path: Path | None = None) -> Dict[str, Dict[str, Any]]:
    """Read every ``modules/*/module.yaml`` manifest, keyed by module name."""
    if modules_path is None:
        modules_path = get_settings().modules_path

    modules: Dict[str, Dict[str, Any]] = {}
    if not modules_path.exists():
        return modules

    for module_dir in sorted(modules_path.iterdir()):
        manifest = module_dir / MANIFEST_NAME
        if not module_dir.is_dir() or not manifest.exists():
            continue
        with open(manifest, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        normalized = _normalize_module(data, path=module_dir)
        if normalized:
            modules[normalized["name"]] = normalized
    return modules
