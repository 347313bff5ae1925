"""Shared constants for the ALEX command line client."""

import string

VERSION = "1.8.0"

# ALEX REST API root, appended to --uri
REST_SUFFIX = "/rest"

# Scratch project naming
PROJECT_NAME_PREFIX = "alex-cli-"
PROJECT_NAME_SUFFIX_LEN = 10
PROJECT_NAME_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits

# ── Polling (seconds) ───────────────────────────────────────────────────────
POLL_TIME_TESTING = 3.0
POLL_TIME_LEARNING = 5.0
POLL_MAX_WAIT = 60 * 60          # upper bound for one polling loop

# ── HTTP ─────────────────────────────────────────────────────────────────────
HTTP_TIMEOUT = 30
USER_AGENT = f"alex-cli/{VERSION}"

# Format requested for machine-readable test reports
JUNIT_FORMAT = "junit+xml"

ACTIONS = ("test", "learn")
SUITE_LAYOUTS = ("nested", "flat")
