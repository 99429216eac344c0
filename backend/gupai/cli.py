"""
Terminal front end for the chat core.

``gupai chat`` is an interactive session: plain lines are sent as messages,
slash commands (``/new``, ``/switch <id>``, ...) become typed commands for the
dispatcher. The remaining subcommands are one-shot views of stored chats and
the ``serve`` command runs the completion provider stub.
"""

import asyncio
import sys
from typing import List, Optional

import click

from .application import ChatApplication
from .config import Settings, settings as default_settings
from .core.commands import (
    ClearChat, DeleteChat, ExportChat, NewChat, SearchChats, SendMessage, SwitchChat,
)
from .core.logging_config import setup_logging
from .core.notifications import Notice
from .models import ChatSession, SearchResult
from .utils.formatting import format_datetime, format_time

NOTICE_COLORS = {"info": "blue", "success": "green", "warning": "yellow", "error": "red"}

HELP_TEXT = """\
Commands:
  /new              start a new chat
  /list             list chats, most recent first
  /switch <id>      switch to a chat (id prefix is enough)
  /delete <id>      delete a chat
  /clear            clear the current chat
  /export [dir]     export the current chat to a text file
  /search <query>   search all chats
  /status           show backend connection status
  /help             show this help
  /quit             leave"""


def _build_settings(data_dir: Optional[str], provider_url: Optional[str]) -> Settings:
    update = {}
    if data_dir:
        update["local_storage_path"] = data_dir
    if provider_url:
        update["provider_base_url"] = provider_url
    return default_settings.model_copy(update=update) if update else default_settings


def _print_notice(notice: Notice) -> None:
    click.secho(f"[{notice.level}] {notice.text}", fg=NOTICE_COLORS.get(notice.level), err=True)


def _print_history(sessions: List[ChatSession], active_id: Optional[str]) -> None:
    if not sessions:
        click.echo("No chats yet.")
        return
    for session in sessions:
        marker = "*" if session.id == active_id else " "
        click.echo(
            f"{marker} {session.id[:8]}  {format_datetime(session.updated_at)}  "
            f"{session.title} ({len(session.messages)} messages)"
        )


def _print_search(results: List[SearchResult], query: str) -> None:
    if not results:
        click.echo(f"No messages match '{query}'.")
        return
    for result in results:
        click.secho(f"{result.session.id[:8]}  {result.session.title}", bold=True)
        for message in result.matching_messages:
            click.echo(f"  [{format_time(message.timestamp)}] {message.sender}: {message.content}")


async def _print_status(chat_app: ChatApplication) -> bool:
    """Show whether the completion provider answers; True if connected."""
    if chat_app.client is None:
        click.echo("Backend: offline (fallback replies only)")
        return False
    report = await chat_app.client.status(chat_app.backend_label)
    state = "connected" if report["connected"] else f"not connected ({report.get('error')})"
    click.echo(f"Backend: {report['backend']} - {state}")
    click.echo(f"  health: {report['endpoints']['health']}")
    click.echo(f"  chat:   {report['endpoints']['chat']}")
    return report["connected"]


def _resolve_id(chat_app: ChatApplication, prefix: str) -> Optional[str]:
    """Full session id for a unique id prefix."""
    matches = [sid for sid in chat_app.manager.sessions if sid.startswith(prefix)]
    if len(matches) == 1:
        return matches[0]
    click.secho(
        f"No chat matches '{prefix}'." if not matches else f"'{prefix}' matches several chats.",
        fg="red", err=True,
    )
    return None


async def _handle_line(chat_app: ChatApplication, line: str) -> bool:
    """Apply one input line. Returns False when the user wants to leave."""
    dispatcher = chat_app.dispatcher
    manager = chat_app.manager

    if not line.startswith("/"):
        task = await dispatcher.submit(SendMessage(line))
        if task is None:
            return True
        click.secho(f"{chat_app.config.assistant_name} is typing...", dim=True, err=True)
        reply = await task
        if reply is not None:
            click.echo(f"{manager.display_name(reply)}: {reply.content}")
        return True

    command, _, argument = line[1:].partition(" ")
    argument = argument.strip()

    if command in ("quit", "exit"):
        return False
    if command == "help":
        click.echo(HELP_TEXT)
    elif command == "new":
        await dispatcher.submit(NewChat())
    elif command == "list":
        _print_history(manager.load_chat_history(), manager.active_id)
    elif command in ("switch", "delete"):
        if not argument:
            click.secho(f"Usage: /{command} <id>", fg="red", err=True)
            return True
        session_id = _resolve_id(chat_app, argument)
        if session_id is None:
            return True
        if command == "switch":
            if await dispatcher.submit(SwitchChat(session_id)):
                for message in manager.current_session.messages:
                    click.echo(f"{manager.display_name(message)}: {message.content}")
        else:
            await dispatcher.submit(DeleteChat(session_id))
    elif command == "clear":
        confirmed = click.confirm(
            "Are you sure you want to clear this chat? This action cannot be undone.",
            default=False,
        )
        await dispatcher.submit(ClearChat(confirmed=confirmed))
    elif command == "export":
        path = await dispatcher.submit(ExportChat(argument or None))
        if path is not None:
            click.echo(f"Saved to {path}")
    elif command == "search":
        results = await dispatcher.submit(SearchChats(argument))
        _print_search(results, argument)
    elif command == "status":
        await _print_status(chat_app)
    else:
        click.secho(f"Unknown command: /{command} (try /help)", fg="red", err=True)
    return True


async def _chat_loop(chat_app: ChatApplication) -> None:
    async with chat_app:
        click.echo(f"Welcome to {chat_app.config.app_name}! Type /help for commands.")
        while True:
            raw = sys.stdin.readline()
            if not raw:
                break
            line = raw.strip()
            if not line:
                continue
            if not await _handle_line(chat_app, line):
                break


@click.group()
@click.option("--data-dir", type=click.Path(file_okay=False), default=None,
              help="Directory holding stored chats.")
@click.option("--provider-url", default=None, help="Base URL of the completion provider.")
@click.option("--offline", is_flag=True, help="Never contact the provider; use fallback replies.")
@click.pass_context
def cli(ctx: click.Context, data_dir: Optional[str], provider_url: Optional[str], offline: bool) -> None:
    """GupAI chat assistant."""
    ctx.ensure_object(dict)
    ctx.obj["settings"] = _build_settings(data_dir, provider_url)
    ctx.obj["offline"] = offline


def _make_app(ctx: click.Context) -> ChatApplication:
    chat_app = ChatApplication(ctx.obj["settings"], offline=ctx.obj["offline"])
    chat_app.notifier.subscribe(_print_notice)
    return chat_app


@cli.command()
@click.pass_context
def chat(ctx: click.Context) -> None:
    """Start an interactive chat."""
    setup_logging(ctx.obj["settings"], console=False)
    asyncio.run(_chat_loop(_make_app(ctx)))


@cli.command()
@click.pass_context
def history(ctx: click.Context) -> None:
    """List stored chats, most recent first."""

    async def _run() -> None:
        chat_app = ChatApplication(ctx.obj["settings"], offline=True)
        chat_app.manager.sessions = await chat_app.session_store.load()
        _print_history(chat_app.manager.load_chat_history(), None)

    asyncio.run(_run())


@cli.command()
@click.argument("query")
@click.pass_context
def search(ctx: click.Context, query: str) -> None:
    """Search all stored chats for QUERY."""

    async def _run() -> None:
        chat_app = ChatApplication(ctx.obj["settings"], offline=True)
        chat_app.manager.sessions = await chat_app.session_store.load()
        _print_search(chat_app.manager.search_chats(query), query)

    asyncio.run(_run())


@cli.command()
@click.argument("chat_id")
@click.option("--dir", "directory", type=click.Path(file_okay=False), default=None,
              help="Where to write the transcript.")
@click.pass_context
def export(ctx: click.Context, chat_id: str, directory: Optional[str]) -> None:
    """Export the stored chat CHAT_ID (id prefix) to a text file."""

    async def _run() -> int:
        chat_app = _make_app(ctx)
        chat_app.manager.sessions = await chat_app.session_store.load()
        session_id = _resolve_id(chat_app, chat_id)
        if session_id is None:
            return 1
        chat_app.manager.active_id = session_id
        path = await chat_app.manager.export_chat(directory)
        if path is None:
            return 1
        click.echo(str(path))
        return 0

    ctx.exit(asyncio.run(_run()))


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Check the completion provider connection."""
    chat_app = ChatApplication(ctx.obj["settings"], offline=ctx.obj["offline"])
    ctx.exit(0 if asyncio.run(_print_status(chat_app)) else 1)


@cli.command()
@click.option("--host", default="0.0.0.0", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
@click.option("--mode", type=click.Choice(["echo", "openai"]), default=None,
              help="Override the backend mode.")
def serve(host: str, port: int, mode: Optional[str]) -> None:
    """Run the completion provider backend."""
    import uvicorn

    if mode:
        default_settings.backend_mode = mode
    uvicorn.run("gupai.main:app", host=host, port=port, reload=default_settings.debug)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
