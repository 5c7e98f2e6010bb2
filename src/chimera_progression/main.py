"""CLI startup entrypoint for Chimera progression."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import NoReturn

import typer
from rich import print
from rich.logging import RichHandler

from chimera_progression.activities import ExpeditionType
from chimera_progression.chests import CHEST_CATALOG, get_chest
from chimera_progression.cli import CliSessionHandler
from chimera_progression.config import settings
from chimera_progression.errors import ChimeraError
from chimera_progression.events import GameEvent, event_name, event_payload
from chimera_progression.models import SkillName, TaskDifficulty, describe_reward
from chimera_progression.quests import objective_description
from chimera_progression.storage import JsonStateStore, backup_info, export_backup, import_backup

app = typer.Typer(help="Chimera progression engine")


@app.callback()
def _configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _build_handler() -> CliSessionHandler:
    return CliSessionHandler(store=JsonStateStore(settings.state_path), settings=settings)


def _events(events: list[GameEvent]) -> list[dict]:
    return [{"event": event_name(event), **event_payload(event)} for event in events]


def _fail(exc: Exception) -> NoReturn:
    print({"error": str(exc)})
    raise typer.Exit(code=1)


@app.command()
def start() -> None:
    """Show runtime configuration."""
    print(
        {
            "app_name": settings.app_name,
            "state_path": settings.state_path,
            "player_name": settings.player_name,
            "rng_seed": settings.rng_seed,
            "notifications_enabled": settings.notifications_enabled,
        }
    )


@app.command()
def status() -> None:
    """Print the player's resources, skills, perks and expeditions."""
    handler = _build_handler()
    try:
        state = handler.load_state()
    except (ChimeraError, OSError, ValueError) as exc:
        _fail(exc)
    print(
        {
            "name": state.name,
            "total_level": state.total_level,
            "total_power_earned": state.total_power_earned,
            "resources": {kind.value: amount for kind, amount in state.ledger},
            "inventory": state.inventory.as_dict(),
            "special_currencies": {cur.value: amount for cur, amount in state.special_currencies.items()},
            "skills": {skill.name.value: {"level": skill.level, "xp": skill.xp} for skill in state.skills},
            "perks": [{"type": perk.type.value, "value": perk.value} for perk in state.perks],
            "expeditions": {exp.type.value: exp.status().value for exp in state.expeditions if not exp.is_completed},
            "prestige_currency": state.ascension.prestige_currency,
        }
    )


@app.command("award-xp")
def award_xp(
    skill: SkillName = typer.Argument(..., help="Skill name, e.g. Strength"),
    amount: int = typer.Argument(..., min=0, help="XP to award"),
) -> None:
    try:
        events = _build_handler().run(lambda session: session.award_xp(skill, amount))
    except (ChimeraError, OSError, ValueError) as exc:
        _fail(exc)
    print({"events": _events(events)})


@app.command("complete-task")
def complete_task(
    skill: SkillName = typer.Argument(..., help="Skill name, e.g. Mind"),
    difficulty: TaskDifficulty = typer.Option(TaskDifficulty.EASY, help="Task difficulty"),
) -> None:
    """Record a finished task: award XP by difficulty and advance quests."""
    try:
        events = _build_handler().run(lambda session: session.complete_task(skill, difficulty))
    except (ChimeraError, OSError, ValueError) as exc:
        _fail(exc)
    print({"events": _events(events)})


@app.command("open-chest")
def open_chest(chest_id: str = typer.Argument(..., help="Chest id, e.g. chest_common")) -> None:
    try:
        chest = get_chest(chest_id)
        rewards, events = _build_handler().run(lambda session: session.open_chest(chest))
    except (ChimeraError, OSError, ValueError) as exc:
        _fail(exc)
    if not rewards:
        print({"opened": False, "chest": chest.id, "available": [c.id for c in CHEST_CATALOG]})
        raise typer.Exit(code=1)
    print({"opened": True, "rewards": [describe_reward(r) for r in rewards], "events": _events(events)})


@app.command("start-expedition")
def start_expedition(expedition: ExpeditionType = typer.Argument(..., help="Expedition type")) -> None:
    try:
        started = _build_handler().run(lambda session: session.start_expedition(expedition))
    except (ChimeraError, OSError, ValueError) as exc:
        _fail(exc)
    print({"expedition": expedition.value, "started": started})
    if not started:
        raise typer.Exit(code=1)


@app.command("collect-expedition")
def collect_expedition(expedition: ExpeditionType = typer.Argument(..., help="Expedition type")) -> None:
    try:
        report, events = _build_handler().run(lambda session: session.collect_expedition(expedition))
    except (ChimeraError, OSError, ValueError) as exc:
        _fail(exc)
    if report is None:
        print({"expedition": expedition.value, "collected": False})
        raise typer.Exit(code=1)
    print({"expedition": expedition.value, "collected": True, "events": _events(events)})


@app.command()
def quests() -> None:
    """List the player's quests and their progress."""
    try:
        state = _build_handler().load_state()
    except (ChimeraError, OSError, ValueError) as exc:
        _fail(exc)
    print(
        [
            {
                "id": quest.id,
                "title": quest.title,
                "objective": objective_description(quest),
                "progress": quest.progress,
                "status": quest.status.value,
            }
            for quest in state.quests
        ]
    )


@app.command("accept-quest")
def accept_quest(quest_id: str) -> None:
    try:
        accepted = _build_handler().run(lambda session: session.accept_quest(quest_id))
    except (ChimeraError, OSError, ValueError) as exc:
        _fail(exc)
    print({"quest_id": quest_id, "accepted": accepted})


@app.command("claim-quest")
def claim_quest(quest_id: str) -> None:
    try:
        events = _build_handler().run(lambda session: session.claim_quest(quest_id))
    except (ChimeraError, OSError, ValueError) as exc:
        _fail(exc)
    print({"quest_id": quest_id, "claimed": bool(events), "events": _events(events)})


@app.command()
def challenges() -> None:
    """List today's challenges and the redeem streak."""
    try:
        state = _build_handler().load_state()
    except (ChimeraError, OSError, ValueError) as exc:
        _fail(exc)
    board = state.challenges
    print(
        {
            "streak": board.streak,
            "challenges": [
                {
                    "kind": challenge.kind.value,
                    "progress": f"{challenge.progress}/{challenge.target}",
                    "redeemed": challenge.redeemed,
                    "rewards": [describe_reward(r) for r in challenge.rewards],
                }
                for challenge in board.challenges
            ],
        }
    )


@app.command("redeem-challenges")
def redeem_challenges() -> None:
    try:
        events = _build_handler().run(lambda session: session.redeem_challenges())
    except (ChimeraError, OSError, ValueError) as exc:
        _fail(exc)
    print({"redeemed": bool(events), "events": _events(events)})


@app.command()
def ascend() -> None:
    """Trade this run's power for prestige currency."""
    try:
        gain = _build_handler().run(lambda session: session.ascend())
    except (ChimeraError, OSError, ValueError) as exc:
        _fail(exc)
    print({"ascended": gain > 0, "prestige_gained": gain})


@app.command("export-backup")
def export_backup_command(output: Path = typer.Argument(..., help="File to write the backup to")) -> None:
    try:
        state = _build_handler().load_state()
        output.write_text(export_backup(state), encoding="utf-8")
    except (ChimeraError, OSError, ValueError) as exc:
        _fail(exc)
    print({"backup": str(output)})


@app.command("import-backup")
def import_backup_command(source: Path = typer.Argument(..., help="Backup file to restore")) -> None:
    try:
        payload = source.read_text(encoding="utf-8")
        info = backup_info(payload)
        state = import_backup(payload)
        _build_handler().replace_state(state)
    except (ChimeraError, OSError, ValueError) as exc:
        _fail(exc)
    print(
        {
            "restored": state.name,
            "version": info.version,
            "timestamp": info.timestamp.isoformat(),
            "record_count": info.record_count,
        }
    )


if __name__ == "__main__":
    app()
