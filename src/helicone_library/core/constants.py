# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""Constants shared by the client, export and metrics packages."""

# =============================================================================
# API ENDPOINTS
# =============================================================================

API_ENDPOINTS = {
    "us": "https://api.helicone.ai",
    "eu": "https://eu.api.helicone.ai",
}

DEFAULT_REGION = "us"
REGIONS = ("us", "eu")

# "raw" talks to the Helicone API directly, "gateway" goes through an
# intermediary service that re-exposes a subset of it.
DEFAULT_MODE = "raw"
MODES = ("raw", "gateway")

# =============================================================================
# QUERY LIMITS
# =============================================================================

# Hard cap enforced by the remote service on a single page
MAX_QUERY_LIMIT = 1000
DEFAULT_QUERY_LIMIT = 25
DEFAULT_SESSION_QUERY_LIMIT = 50
DEFAULT_USER_METRICS_LIMIT = 100

# Table every convenience filter targets
REQUEST_TABLE = "request_response_rmt"
SESSION_ID_PROPERTY = "Helicone-Session-Id"

# =============================================================================
# TRANSPORT
# =============================================================================

DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY = 1.0  # seconds, doubled on every attempt
DEFAULT_TIMEOUT = 60.0
GATEWAY_TIMEOUT = 30.0

# =============================================================================
# EXPORT / METRICS
# =============================================================================

DEFAULT_EXPORT_BATCH_SIZE = 1000
SESSION_EXPORT_BATCH_SIZE = 50
EXPORT_BATCH_DELAY = 0.1  # seconds between batches
SESSION_REQUESTS_LIMIT = 100
SESSION_LOOKBACK_DAYS = 150

# Aggregation sample bound per connection mode. Overridable through config.
DEFAULT_SAMPLE_LIMITS = {
    "raw": 1000,
    "gateway": 200,
}

DEFAULT_REQUESTS_EXPORT_PATH = "requests-export.jsonl"
DEFAULT_SESSIONS_EXPORT_PATH = "sessions-export.jsonl"
