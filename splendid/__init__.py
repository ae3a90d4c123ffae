"""
Splendid - Gem-trading card game engine

A deterministic rules engine for 2-4 player matches of the gem-trading
card game, with heuristic bots for empty seats. Provides:
- The card and noble catalog
- State management through a pure reducer
- Legal action generation
- Seeded setup and exact replay
- Bot policies and in-memory match hosting
"""

__version__ = "0.1.0"
