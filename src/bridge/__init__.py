"""Translation and identity-resolution core of the Slack to Mattermost bridge.

This package provides:
- Identity caches and resolution (Slack ids to Mattermost users/channels)
- Channel name sanitization and provisioning
- Mention rewriting and thread root resolution
- Message translation and per-event dispatch
"""
