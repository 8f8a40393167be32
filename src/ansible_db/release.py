# Copyright (c) 2024 ansible-db Contributors
# MIT License

"""ansible-db release metadata."""

from __future__ import annotations

__version__ = "1.0.0"
__author__ = "ansible-db Contributors"

# Version info tuple for programmatic comparison
VERSION_INFO = (1, 0, 0)
