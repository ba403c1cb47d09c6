# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Core constants shared across the cec-conformance engine."""

# Exchange timeouts (milliseconds)
DEFAULT_REPLY_TIMEOUT_MS = 2000
RECORD_REPLY_TIMEOUT_MS = 10000  # Record/timer replies may take several seconds
OSD_CLEAR_TIMEOUT_MS = 250
REPLY_WARN_THRESHOLD_MS = 1000

# Long-running operations (seconds): wake from standby, deck seek
DEFAULT_LONG_TIMEOUT_S = 60

# Deck seek completion is polled once per second
DECK_POLL_INTERVAL_S = 1.0

# Power-on wait after asking the operator
POWER_ON_POLL_INTERVAL_S = 1.0

# HEC discovery: wait up to 1 s for each report, never longer than 5 s in total
HEC_DISCOVERY_IDLE_MS = 1000
HEC_DISCOVERY_WINDOW_MS = 5000

# Inactive Source follow-up window
INACTIVE_SOURCE_WAIT_MS = 3000

# OSD string interactive wait (CEC 1.4b CTS asks for at least 20 s)
OSD_CLEAR_WAIT_S = 20
OSD_UNTIL_CLEARED_WAIT_S = 3

# Exit codes
EXIT_OK = 0
EXIT_FAILURE_CAP = 250
EXIT_ERROR = 255
