"""
CLI module for the Audible chapters client.

Subcommands:
- auth: Device authentication (generate ADP_TOKEN / PRIVATE_KEY)
- chapters: Fetch chapters for ASINs
- regions: List supported marketplaces
"""

from .main import app

__all__ = ["app"]
