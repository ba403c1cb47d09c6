# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

from importlib.metadata import PackageNotFoundError, version  # type: ignore

try:
    __version__ = version("cec-conformance")
except PackageNotFoundError:
    # Package not installed in production mode
    __version__ = "0.1.0"
