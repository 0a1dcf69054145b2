"""Access token lookup for CLI commands."""

from typing import Any

from .config import config
from .messages import default_catalog
from .output import OutputFormatter


def require_api_key(ctx: Any, out: OutputFormatter) -> str:
    """Return the access token or exit the command.

    The ``--token`` option (or NETLIFY_AUTH_TOKEN) takes precedence over the
    token stored by ``pynetlify init``.

    Args:
        ctx: Click context
        out: Output formatter for error messages

    Returns:
        The access token
    """
    api_key = ctx.obj.get("api_key") or config.api_key
    if not api_key:
        out.error(default_catalog.translate("error.pat.missing"))
        out.info(default_catalog.translate("warn.needPat"))
        ctx.exit(1)
    return api_key
