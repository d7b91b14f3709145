from __future__ import annotations

from fastapi import Request

from didtools.config import Settings


def get_settings(request: Request) -> Settings:
    """Return the settings the app was created with (from `app.state`)."""
    return request.app.state.settings
