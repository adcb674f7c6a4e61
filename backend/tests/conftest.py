"""Root conftest — shared test configuration."""

import os

# Tests never talk to a real Redis; settings fall back to the no-cache default
os.environ.pop("REDIS_URL", None)
os.environ.pop("DEFAULT_RULE_ID", None)
os.environ.setdefault("LOG_LEVEL", "WARNING")
