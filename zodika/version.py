# zodika/version.py
from __future__ import annotations
import os

# Single place to bump the app version (overridable via env for CI/preview)
VERSION = os.getenv("ZODIKA_VERSION", "0.1.0")

# Surfaced in every report so consumers can detect behavior drift
TEXTS_VERSION = "v1.9"
SCORING_VERSION = "v1.2"
