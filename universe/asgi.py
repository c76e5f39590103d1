from __future__ import annotations

from universe.engine import build_app

app = build_app()
