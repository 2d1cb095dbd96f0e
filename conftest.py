"""
Repository-level pytest hook.

Tests live under app/; pyproject.toml puts app/ on the import path.
"""

import os

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")
