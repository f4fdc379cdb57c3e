"""Portfolio admin MCP server implementation using FastMCP."""

import logging
from contextlib import asynccontextmanager
from typing import Any, Literal

from fastmcp import FastMCP

from .admin import AdminConsole, AdminScreen
from .client import PortfolioClient
from .config import ServerConfig, setup_logging
from .models import ResourceKind

logger = logging.getLogger(__name__)

# Global console instance
_console: AdminConsole | None = None

KindName = Literal["experience", "project", "education", "certification", "skill_category"]


def get_console() -> AdminConsole:
    """Get the global admin console instance."""
    if _console is None:
        raise RuntimeError("Admin console not initialized. Server not started properly.")
    return _console


def _screen(kind: str) -> AdminScreen:
    return get_console().screen(ResourceKind(kind))


def _result(screen: AdminScreen | None = None, **extra: Any) -> dict:
    console = get_console()
    result: dict[str, Any] = dict(extra)
    if screen is not None:
        result.update(screen.describe())
    result["notifications"] = [
        {"id": n.id, "level": n.level, "message": n.message} for n in console.notifier.notifications
    ]
    result["authenticated"] = console.authenticated
    return result


@asynccontextmanager
async def lifespan(_app: FastMCP):  # type: ignore[no-untyped-def]
    """Manage server lifecycle."""
    global _console

    logger.info("Starting portfolio admin server")

    config = ServerConfig()  # type: ignore[call-arg]
    api_config = config.get_api_config()
    client = PortfolioClient(api_config)
    _console = AdminConsole(client)
    logger.info(f"Portfolio client initialized with base URL: {api_config.base_url}")

    if not client.is_authenticated and config.has_credentials:
        await _console.login(config.email, config.password.get_secret_value())

    yield

    logger.info("Shutting down portfolio admin server")
    await client.close()
    _console = None


mcp = FastMCP(
    "Portfolio Admin",
    instructions="Edit, order and publish portfolio records (experience, projects, education, certifications, skills)",
    lifespan=lifespan,
)


@mcp.tool(name="portfolio_login", description="Sign in to the portfolio admin API")
async def login(email: str, password: str) -> dict:
    ok = await get_console().login(email, password)
    return _result(success=ok)


@mcp.tool(name="portfolio_list", description="Reload and show one collection in display order")
async def list_collection(kind: KindName) -> dict:
    screen = _screen(kind)
    ok = await screen.refresh()
    return _result(screen, success=ok)


@mcp.tool(name="portfolio_reorder", description="Move one record from from_index to to_index")
async def reorder(kind: KindName, from_index: int, to_index: int) -> dict:
    """Move a record; the order snaps back if the server rejects it.

    Args:
        kind: Collection to reorder
        from_index: Current 0-based position
        to_index: Target 0-based position
    """
    screen = _screen(kind)
    ok = await screen.reorder(from_index, to_index)
    return _result(screen, success=ok)


@mcp.tool(name="portfolio_set_published", description="Publish or unpublish one record")
async def set_published(kind: KindName, entity_id: str, published: bool) -> dict:
    screen = _screen(kind)
    ok = await screen.set_published(entity_id, published)
    return _result(screen, success=ok)


@mcp.tool(name="portfolio_delete", description="Delete one record (closes its draft if open)")
async def delete(kind: KindName, entity_id: str) -> dict:
    screen = _screen(kind)
    ok = await screen.delete(entity_id)
    return _result(screen, success=ok)


@mcp.tool(name="portfolio_open_draft", description="Open a draft: new record when entity_id is omitted")
async def open_draft(kind: KindName, entity_id: str | None = None) -> dict:
    screen = _screen(kind)
    if entity_id is None:
        screen.new_draft()
    else:
        screen.edit(entity_id)
    return _result(screen)


@mcp.tool(name="portfolio_edit_draft", description="Set scalar fields on the open draft (snake_case names)")
async def edit_draft(kind: KindName, fields: dict[str, Any]) -> dict:
    screen = _screen(kind)
    draft = screen.draft
    if draft is None:
        raise ValueError("No draft is open")
    for name, value in fields.items():
        draft.set_field(name, value)
    return _result(screen)


@mcp.tool(name="portfolio_edit_bullets", description="Add, remove, move or rewrite a bullet in the open draft")
async def edit_bullets(
    kind: KindName,
    action: Literal["add", "remove", "move", "set"],
    index: int | None = None,
    to_index: int | None = None,
    content: str = "",
) -> dict:
    """Edit the draft's bullets in memory; nothing is sent until save.

    Args:
        kind: experience or project
        action: add (append content) | remove (index) | move (index -> to_index) | set (index, content)
    """
    screen = _screen(kind)
    draft = screen.bulleted_draft()
    if action == "add":
        draft.add_bullet(content)
    elif index is None:
        raise ValueError(f"'{action}' needs an index")
    elif action == "remove":
        draft.remove_bullet(index)
    elif action == "move":
        if to_index is None:
            raise ValueError("'move' needs to_index")
        draft.move_bullet(index, to_index)
    else:
        draft.set_bullet_content(index, content)
    return _result(screen)


@mcp.tool(name="portfolio_cancel_draft", description="Discard the open draft without saving")
async def cancel_draft(kind: KindName) -> dict:
    screen = _screen(kind)
    screen.cancel()
    return _result(screen)


@mcp.tool(name="portfolio_save_draft", description="Save the open draft, including its bullets")
async def save_draft(kind: KindName) -> dict:
    screen = _screen(kind)
    saved = await screen.save()
    return _result(
        screen,
        success=saved is not None,
        saved=saved.model_dump(by_alias=True) if saved is not None else None,
    )


@mcp.tool(name="portfolio_reorder_skill_items", description="Move a skill inside its category")
async def reorder_skill_items(category_id: str, from_index: int, to_index: int) -> dict:
    console = get_console()
    ok = await console.skill_items.reorder(category_id, from_index, to_index)
    return _result(console.screen(ResourceKind.SKILL_CATEGORY), success=ok)


@mcp.tool(name="portfolio_notifications", description="List notifications; pass dismiss_id to dismiss one")
async def notifications(dismiss_id: int | None = None, clear: bool = False) -> dict:
    notifier = get_console().notifier
    if clear:
        notifier.clear()
    elif dismiss_id is not None:
        notifier.dismiss(dismiss_id)
    return _result()


def main() -> None:
    config = ServerConfig()  # type: ignore[call-arg]
    setup_logging(config.log_level)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
