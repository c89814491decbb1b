"""
Feature modules.

- activities: read-only activity feed
- badges: catalog, criteria evaluation, tier awards
- group_activity: group activity detection
"""
