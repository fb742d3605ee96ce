"""Schema change detection and integrity locking.

Two independent persisted artifacts live here:

* the **lock file**, holding the last-known snapshot of every schema plus the
  generated-migration history, compared against the current schemas by the
  diff engine;
* the **version chain**, an append-only, hash-linked ledger of deployment
  blocks that makes post-deployment edits to locked schemas detectable.
"""

__version__ = "0.1.0"
