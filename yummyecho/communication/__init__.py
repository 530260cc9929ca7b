"""Communication sub-core — everything that touches the chat platform.

- Platform: MessagingPlatform interface and its Telegram implementation
- Messages: static reply texts shown to chat users
- Errors: exception → user-facing reply classification
- Telegram: the bot channel (handlers, gate wiring, command menu)
"""
