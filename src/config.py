"""Runtime configuration constants."""

from __future__ import annotations

import os


DEFAULT_HOME_URL = os.getenv("X_HOME_URL", "https://x.com")
DEFAULT_MIGRATE_URL = os.getenv("X_MIGRATE_URL", "https://x.com/x/migrate")
DEFAULT_ONDEMAND_FILE_URL = os.getenv(
    "X_ONDEMAND_FILE_URL",
    "https://abs.twimg.com/responsive-web/client-web/ondemand.s.{filename}a.js",
)
DEFAULT_USER_AGENT = os.getenv(
    "X_USER_AGENT",
    (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/145.0.0.0 Safari/537.36"
    ),
)
DEFAULT_ACCEPT_LANGUAGE = "en-US,en;q=0.9"
DEFAULT_TIMEOUT_SECONDS = float(os.getenv("X_TIMEOUT_SECONDS", "30"))

# Fixed by the web client bundle. Changing any of these yields rejected ids.
DEFAULT_RANDOM_KEYWORD = "obfiowerehiring"
DEFAULT_ADDITIONAL_RANDOM_NUMBER = 3
EPOCH_OFFSET_SECONDS = 1682924400
TOTAL_ANIMATION_TIME = 4096
VERIFICATION_META_NAME = "twitter-site-verification"
FRAME_ID_PREFIX = "loading-x-anim"
