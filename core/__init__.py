"""Core module - configuration, observability and security plumbing.

Nothing here knows about Microsoft Graph or the CSV layout; those live in
/connectors/ and /archive/.
"""

__version__ = "1.0.0"
