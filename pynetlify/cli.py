"""CLI interface for deploying folders to Netlify."""

import logging
import re
from pathlib import Path
from typing import Any, Optional

import click

from .api import NetlifyClient
from .auth import require_api_key
from .cli_progress import DeployProgressDisplay
from .config import config
from .deploy import DeployEngine, DeployProgressTracker, ManifestBuilder
from .deploy.progress import DeployProgressEvent, DeployProgressInfo
from .exceptions import NetlifyAPIError, NetlifyAuthenticationError, NetlifyError
from .messages import default_catalog, describe_error
from .models import SiteInfo
from .output import OutputFormatter
from .utils import DEFAULT_MAX_POLL_ATTEMPTS, DEFAULT_POLL_INTERVAL

logger = logging.getLogger(__name__)

t = default_catalog.translate

_SITE_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9]+$")


def _load_current_site() -> Optional[SiteInfo]:
    stored = config.get_current_site()
    if stored is None:
        return None
    return SiteInfo.from_dict(stored)


def _remember_site(site: SiteInfo) -> None:
    config.save_current_site(site.id, name=site.name, url=site.display_url)


@click.group()
@click.option(
    "--token", "-t", envvar="NETLIFY_AUTH_TOKEN", help="Netlify personal access token"
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="pynetlify")
@click.pass_context
def main(
    ctx: Any,
    token: Optional[str],
    quiet: bool,
    json: bool,
    verbose: bool,
) -> None:
    """PyNetlify - Deploy a local folder to a Netlify site."""
    ctx.ensure_object(dict)
    ctx.obj["api_key"] = token
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)
    ctx.obj["verbose"] = verbose

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("pynetlify").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command()
@click.option(
    "--token",
    "-t",
    prompt="Enter your Netlify personal access token",
    hide_input=True,
    help="Netlify personal access token",
)
@click.pass_context
def init(ctx: Any, token: str) -> None:
    """Store a Netlify access token.

    The token is saved in ~/.config/pynetlify/config.json for future use.
    """
    out: OutputFormatter = ctx.obj["out"]
    token = token.strip()
    if not token:
        out.error("Access token cannot be empty")
        ctx.exit(1)

    out.info("Validating access token...")
    try:
        with NetlifyClient(api_key=token) as client:
            client.list_sites(per_page=1)
        out.success("✓ Access token is valid")
    except NetlifyAuthenticationError:
        out.error(t("error.pat.invalid"))
        if not click.confirm("Save access token anyway?", default=False):
            out.warning("Configuration cancelled.")
            ctx.exit(1)
    except NetlifyAPIError as e:
        out.error(f"Access token validation failed: {describe_error(e)}")
        if not click.confirm("Save access token anyway?", default=False):
            out.warning("Configuration cancelled.")
            ctx.exit(1)

    config.save_api_key(token)
    out.print_summary(
        "Initialization Complete",
        [
            ("Status", t("info.pat.saved")),
            ("Config file", str(config.get_config_path())),
        ],
    )


@main.command()
@click.pass_context
def logout(ctx: Any) -> None:
    """Remove the stored access token."""
    out: OutputFormatter = ctx.obj["out"]
    config.clear_api_key()
    out.success(t("info.pat.cleared"))


@main.command()
@click.argument(
    "path",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    required=False,
)
@click.pass_context
def folder(ctx: Any, path: Optional[Path]) -> None:
    """Set or show the folder to deploy.

    PATH: Local folder (omit to show the current one)
    """
    out: OutputFormatter = ctx.obj["out"]

    if path is None:
        current = config.get_current_folder()
        if out.json_output:
            out.output_json({"folder": str(current) if current else None})
        elif current is None:
            out.warning(t("warn.noFolder"))
        else:
            out.info(f"Deploy folder: {current}")
        return

    resolved = path.resolve()
    config.save_current_folder(resolved)
    out.success(t("info.folder.selected", path=resolved))


@main.command()
@click.pass_context
def sites(ctx: Any) -> None:
    """List the sites of your Netlify account."""
    out: OutputFormatter = ctx.obj["out"]
    api_key = require_api_key(ctx, out)

    try:
        with NetlifyClient(api_key=api_key) as client:
            site_list = client.list_sites()
    except NetlifyError as e:
        out.error(describe_error(e))
        ctx.exit(1)
        return

    if not site_list:
        if out.json_output:
            out.output_json([])
        else:
            out.warning(t("warn.noSites"))
        return

    current = _load_current_site()
    table_data = [
        {
            "id": site.id,
            "name": site.name,
            "url": site.display_url,
            "current": "*" if current is not None and current.id == site.id else "",
        }
        for site in site_list
    ]
    out.output_table(
        table_data,
        ["current", "name", "id", "url"],
        {"current": "", "name": "Name", "id": "ID", "url": "URL"},
    )


@main.command()
@click.argument("identifier", type=str, required=False)
@click.pass_context
def site(ctx: Any, identifier: Optional[str]) -> None:
    """Select or show the site to deploy to.

    IDENTIFIER: Site ID or name (omit to show the current site).
    Names are matched case-insensitively.

    Examples:
        pynetlify site                 # Show current site
        pynetlify site myblog          # Select by name
        pynetlify site 3f1c...e2a9     # Select by ID
    """
    out: OutputFormatter = ctx.obj["out"]

    if identifier is None:
        current = _load_current_site()
        if out.json_output:
            out.output_json(current.to_dict() if current else None)
        elif current is None:
            out.warning(t("warn.noSite"))
        else:
            out.info(f"Current site: {current.display_name} ({current.id})")
            if current.display_url:
                out.info(f"URL: {current.display_url}")
        return

    api_key = require_api_key(ctx, out)
    try:
        with NetlifyClient(api_key=api_key) as client:
            selected: Optional[SiteInfo] = None
            identifier_lower = identifier.lower()
            for candidate in client.list_sites():
                if (
                    candidate.id == identifier
                    or candidate.name.lower() == identifier_lower
                ):
                    selected = candidate
                    break
            if selected is None:
                # Not among the first page of sites; try it as an ID
                selected = client.get_site(identifier)
    except NetlifyError as e:
        out.error(describe_error(e))
        ctx.exit(1)
        return

    _remember_site(selected)
    out.success(t("info.site.selected", name=selected.display_name))


@main.command("create-site")
@click.argument("name", type=str, required=False)
@click.pass_context
def create_site(ctx: Any, name: Optional[str]) -> None:
    """Create a new site and select it.

    NAME: Optional site name (letters and digits only). Netlify picks a
    random name if omitted.
    """
    out: OutputFormatter = ctx.obj["out"]
    api_key = require_api_key(ctx, out)

    if name is not None:
        name = name.strip()
        if name and not _SITE_NAME_PATTERN.match(name):
            out.error(t("input.site.validate"))
            ctx.exit(1)

    try:
        with NetlifyClient(api_key=api_key) as client:
            created = client.create_site(name)
    except NetlifyAPIError as e:
        message = str(e)
        if "subdomain" in message and "unique" in message:
            out.error(t("error.site.name.taken"))
        else:
            out.error(describe_error(e))
        ctx.exit(1)
        return
    except NetlifyError as e:
        out.error(describe_error(e))
        ctx.exit(1)
        return

    _remember_site(created)

    if out.json_output:
        out.output_json(created.to_dict())
    elif name and created.name and created.name != name:
        out.warning(t("info.site.created.adjusted", name=created.name))
    else:
        out.success(t("info.site.created", name=created.display_name))


@main.command()
@click.argument(
    "path",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    required=False,
)
@click.option("--site", "-s", "site_id", help="Site ID (defaults to the current site)")
@click.option(
    "--ignore",
    "-i",
    "ignore_patterns",
    multiple=True,
    help="Glob pattern to exclude from the deploy (can be repeated)",
)
@click.option(
    "--max-attempts",
    type=click.IntRange(min=1),
    default=DEFAULT_MAX_POLL_ATTEMPTS,
    show_default=True,
    help="Maximum number of status checks while waiting for the deploy",
)
@click.option(
    "--poll-interval",
    type=click.FloatRange(min=0),
    default=DEFAULT_POLL_INTERVAL,
    show_default=True,
    help="Seconds between status checks",
)
@click.option(
    "--no-progress",
    is_flag=True,
    help="Disable progress bars",
)
@click.pass_context
def deploy(
    ctx: Any,
    path: Optional[Path],
    site_id: Optional[str],
    ignore_patterns: tuple[str, ...],
    max_attempts: int,
    poll_interval: float,
    no_progress: bool,
) -> None:
    """Deploy a local folder to a Netlify site.

    PATH: Folder to deploy (defaults to the folder set with 'pynetlify folder')

    Only files whose content Netlify does not already have are uploaded.

    Examples:
        pynetlify deploy                      # Current folder and site
        pynetlify deploy ./public -s SITE_ID  # Explicit folder and site
        pynetlify deploy -i "*.map"           # Skip source maps
    """
    out: OutputFormatter = ctx.obj["out"]
    api_key = require_api_key(ctx, out)

    root = path or config.get_current_folder()
    if root is None:
        out.error(t("warn.noFolder"))
        ctx.exit(1)
        return
    if not root.is_dir():
        out.error(f"Path is not a directory: {root}")
        ctx.exit(1)
        return

    target: Optional[SiteInfo] = (
        SiteInfo(id=site_id) if site_id else _load_current_site()
    )
    if target is None:
        out.error(t("warn.noSite"))
        ctx.exit(1)
        return

    if not out.quiet:
        out.info(f"Folder: {root}")
        out.info(f"Site: {target.display_name}")
        out.info("")

    builder = ManifestBuilder(ignore_patterns=list(ignore_patterns))
    show_progress = not (no_progress or out.quiet or out.json_output)

    try:
        with NetlifyClient(api_key=api_key) as client:
            if show_progress:
                with DeployProgressDisplay() as display:
                    engine = DeployEngine(
                        client,
                        builder=builder,
                        max_poll_attempts=max_attempts,
                        poll_interval=poll_interval,
                        progress=display.create_tracker(),
                    )
                    result = engine.deploy(root, target)
            else:

                def report(info: DeployProgressInfo) -> None:
                    if info.event in (
                        DeployProgressEvent.STAGE_START,
                        DeployProgressEvent.UPLOAD_FILE_COMPLETE,
                    ):
                        out.progress_message(info.message)

                engine = DeployEngine(
                    client,
                    builder=builder,
                    max_poll_attempts=max_attempts,
                    poll_interval=poll_interval,
                    progress=DeployProgressTracker(callback=report),
                )
                result = engine.deploy(root, target)
    except KeyboardInterrupt:
        out.warning("\nDeploy cancelled by user")
        ctx.exit(130)
        return
    except (NetlifyError, OSError) as e:
        out.error(describe_error(e))
        ctx.exit(1)
        return

    if out.json_output:
        out.output_json(result.to_dict())
        return

    if result.ready:
        out.success(t("info.deploy.done", url=result.url))
    else:
        out.warning(t("warn.deploy.processing", url=result.url))

    out.print_summary(
        "Deploy Summary",
        [
            ("Deploy ID", result.deploy.id),
            ("State", result.deploy.state or "unknown"),
            ("Files", str(result.file_count)),
            ("Uploaded", f"{result.uploaded}/{result.required}"),
            ("URL", result.url or "-"),
        ],
    )


@main.command("open")
@click.pass_context
def open_site(ctx: Any) -> None:
    """Open the current site in a browser."""
    out: OutputFormatter = ctx.obj["out"]
    current = _load_current_site()
    if current is None:
        out.error(t("warn.noSite"))
        ctx.exit(1)
        return

    url = current.display_url
    if not url:
        out.warning(t("warn.noSiteUrl"))
        return

    out.print(url)
    click.launch(url)
    out.info(t("info.site.opened", url=url))


@main.command()
@click.pass_context
def status(ctx: Any) -> None:
    """Show the configured token, folder and site."""
    out: OutputFormatter = ctx.obj["out"]
    has_token = bool(ctx.obj.get("api_key") or config.is_configured())
    current_folder = config.get_current_folder()
    current_site = _load_current_site()

    if out.json_output:
        out.output_json(
            {
                "token_configured": has_token,
                "folder": str(current_folder) if current_folder else None,
                "site": current_site.to_dict() if current_site else None,
                "config_file": str(config.get_config_path()),
            }
        )
        return

    out.output_table(
        [
            {"field": "Access token", "value": "set" if has_token else "not set"},
            {"field": "Folder", "value": str(current_folder or "-")},
            {
                "field": "Site",
                "value": (
                    f"{current_site.display_name} ({current_site.id})"
                    if current_site
                    else "-"
                ),
            },
            {
                "field": "URL",
                "value": (current_site.display_url if current_site else "") or "-",
            },
            {"field": "Config file", "value": str(config.get_config_path())},
        ],
        ["field", "value"],
        {"field": "Field", "value": "Value"},
    )


if __name__ == "__main__":
    main()
