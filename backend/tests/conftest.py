from __future__ import annotations

import os
from pathlib import Path
import sys

# DB e segreti di test prima che app.core.config costruisca i Settings
os.environ.setdefault("RANGEOPS_DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("RANGEOPS_JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("RANGEOPS_STRUCTURED_LOGGING", "false")

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.append(str(BACKEND_ROOT))
