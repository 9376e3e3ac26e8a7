"""
Room Keeper - Highrise Room Moderation and Command Bot

Room Keeper connects to a single Highrise room and answers chat commands,
gated by a layered permission model, while keeping moderation state on disk.

Core Components:

- **Command Router**: Turns public chat, DMs and whispers into parsed,
  authorized command executions, plus the unprefixed emote shortcuts
- **Permissions & Ledger**: Owner/mod roles, time-boxed command bans and
  mutes with lazy expiry, and the forbidden-word list
- **Emote Loops**: One cancellable repeating emote task per user
- **Position Guard**: Frozen-position enforcement and large-jump correction
- **Room Bridge**: Narrow action surface over the Highrise SDK

Usage:
    from roomkeeper.main import main
    main()  # Connects using HIGHRISE_API_TOKEN / HIGHRISE_ROOM_ID
"""
