"""
Spookbot — Trick-or-Treat Candy Economy for Discord
====================================================
Members run ``/trickortreat`` every couple of hours to collect (or lose)
candy, browse a small title shop, check their inventory, and compete on a
global leaderboard.

Package layout::

    spookbot/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Presentation constants + profile defaults
    ├── errors.py          # Error taxonomy
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + async helper with timeout
    │   └── models.py      # Profile ORM model
    ├── engine/
    │   ├── cooldown.py    # Cooldown gate
    │   ├── reward.py      # Trick / treat outcome calculation
    │   ├── shop.py        # Static title shop catalog
    │   └── leaderboard.py # Deterministic top-N ranking
    ├── services/
    │   ├── profile_store.py  # Profile reads + atomic read-modify-write
    │   ├── game_service.py   # Per-command orchestration
    │   └── embeds.py         # Discord embed builders
    └── bot/
        ├── core.py        # Bot subclass, cog loader
        └── cogs/
            └── candy.py   # /trickortreat, /inventory, /shop, /topspook
"""

__version__ = "0.1.0"
