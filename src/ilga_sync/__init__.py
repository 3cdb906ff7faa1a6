"""Incremental bill synchronizer for the Illinois General Assembly website.

Crawls the bill listing for a session, re-derives only the bills whose
actions table changed since the previous run, and produces a batch of
progress notifications for subscribers:

- **Change detection**: MD5 fingerprint of each bill's actions table
- **Action tagging**: ordered rule table over the raw action text
- **Progress tracking**: life-cycle automaton over the tagged actions
- **Roll calls**: per-legislator votes recovered from the vote PDFs

Run a sync with: ``python scripts/sync.py``
"""
