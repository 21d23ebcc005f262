"""
CLI subcommands for rooms.

Usage:
    coderoom rooms list
    coderoom rooms describe <room>
    coderoom rooms join <room> --name NAME
"""

import asyncio

import typer

from coderoom.cli._http import _http_get

rooms_app = typer.Typer(help="Inspect and join collaborative rooms")


@rooms_app.command("list")
def rooms_list():
    """List rooms that currently have participants."""
    data = _http_get("/rooms")
    rooms = data.get("rooms", [])

    if not rooms:
        typer.echo("No active rooms.")
        return

    typer.echo(f"🧑‍💻 Active rooms ({len(rooms)}):\n")
    for room in rooms:
        typer.echo(
            f"  {room['sessionId']}  "
            f"[{room['language']}, {room['memberCount']} member(s)]"
        )


@rooms_app.command("describe")
def rooms_describe(
    room: str = typer.Argument(help="Room (session) id"),
):
    """Show members and language of a room."""
    data = _http_get(f"/rooms/{room}")

    typer.echo(f"🧑‍💻 Room: {data['sessionId']}")
    typer.echo(f"   Language: {data['language']}")
    typer.echo(f"   Members ({data['memberCount']}):")
    for member in data.get("members", []):
        typer.echo(f"     - {member['displayName']} ({member['connId']})")


@rooms_app.command("join")
def rooms_join(
    room: str = typer.Argument(help="Room (session) id"),
    name: str = typer.Option(..., "--name", "-n", help="Display name"),
    attempts: int = typer.Option(
        0, "--attempts", help="Give up after N failed connects (0 = retry forever)"
    ),
):
    """Join a room and print presence, language and code events."""
    from coderoom.client.room_client import RoomClient
    from coderoom.errors import ChannelConnectError

    client = RoomClient(
        session_id=room,
        display_name=name,
        max_attempts=attempts or None,
    )

    def _print_event(event: dict) -> None:
        kind = event.get("type")
        if kind == "joined":
            names = ", ".join(client.members.values())
            typer.echo(f"👋 {event.get('displayName')} joined (members: {names})")
        elif kind == "disconnected":
            typer.echo(f"🚪 {event.get('displayName')} left")
        elif kind == "language-change":
            typer.echo(f"🔤 language: {event.get('language')}")
        elif kind == "code-change":
            typer.echo(f"📝 buffer updated ({len(client.buffer.text)} chars)")
        elif kind == "error":
            typer.echo(f"❌ {event.get('message')}")

    client.on_event(_print_event)

    try:
        asyncio.run(client.run())
    except ChannelConnectError as e:
        typer.echo(f"❌ {e}")
        raise typer.Exit(code=1)
    except KeyboardInterrupt:
        client.stop()
