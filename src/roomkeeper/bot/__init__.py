"""
Room connection, event hooks and command dispatch.

- **room_bridge.py**: Abstract action surface of the room.
- **highrise_bridge.py**: Bridge implementation over the Highrise SDK.
- **room_bot.py**: SDK event hooks wired to the router, guard and greeter.
- **command_router.py**: Chat-to-command state machine.
- **bot_state.py**: Session state shared by router and handlers.
- **responder.py**: Channel-aware reply helper.
"""
