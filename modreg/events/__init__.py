"""Consumers of registry notifications.

- Journal: append-only JSONL record of every emitted event
- Webhooks: signed HTTP delivery of events to indexers
"""
