# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""String utility functions for cec-conformance."""

import re


def safename(name: str) -> str:
    """Normalize a test case name for use on the command line.

    Every run of non-alphanumeric characters becomes a single hyphen
    (leading and trailing runs are dropped) and letters are lowercased.

    Args:
        name: The display name of a test case (e.g., "Give CEC Version").

    Returns:
        The safe name (e.g., "give-cec-version").

    Examples:
        >>> safename("Recognized/unrecognized message consistency")
        'recognized-unrecognized-message-consistency'
        >>> safename("CDC_HEC_Discover")
        'cdc-hec-discover'
    """
    return "-".join(part.lower() for part in re.split(r"[^a-zA-Z0-9]+", name) if part)
