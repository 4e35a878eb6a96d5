"""
Services layer - sync, notification and workflow logic.
Routes stay thin and call into these classes.

DESIGN PRINCIPLE:
- Services depend on RemoteStore only, never on a database SDK
- The caller's Session is passed in explicitly; services never look it up
- Notifications are side effects of actions and never fail them
"""
