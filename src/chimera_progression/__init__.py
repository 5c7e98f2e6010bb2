"""Gamified self-improvement progression engine: skills, perks, loot, quests and timed activities."""
