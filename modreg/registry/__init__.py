"""Registry — the single source of truth for moderated content.

The registry provides:
- Submission: register content references under sequential ids
- Reporting: one report per (content, reporter), auto-escalation at a threshold
- Moderation: moderator-driven status changes, terminal removal
- Roles: an owner who manages the moderator set
"""
