"""Skill XP curve."""

from __future__ import annotations

from .models import Skill, TaskDifficulty

XP_PER_LEVEL = 100

_DIFFICULTY_XP: dict[TaskDifficulty, int] = {
    TaskDifficulty.TRIVIAL: 10,
    TaskDifficulty.EASY: 20,
    TaskDifficulty.MEDIUM: 35,
    TaskDifficulty.HARD: 60,
    TaskDifficulty.EPIC: 100,
}


def threshold_for(level: int) -> int:
    """XP needed to advance from ``level`` to ``level + 1``."""
    return level * XP_PER_LEVEL


def add_xp(skill: Skill, amount: int) -> int:
    """Add XP to ``skill``, cascading level-ups. Returns the number of levels gained."""
    skill.xp += amount
    gained = 0
    while skill.xp >= threshold_for(skill.level):
        skill.xp -= threshold_for(skill.level)
        skill.level += 1
        gained += 1
    return gained


def xp_for_difficulty(difficulty: TaskDifficulty) -> int:
    return _DIFFICULTY_XP[difficulty]
