"""
Blocklist Updater

Downloads ad and tracking domain lists, validates and deduplicates them,
drops domains that no longer exist and writes plain and optimized
blocklists.
"""

__version__ = "1.0.0"
