# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Error taxonomy for the conformance engine.

Errors raised inside a test case body are converted into verdicts by the
orchestrator; only setup-time errors (operator input, registration,
transport loading) ever reach the CLI.
"""


class CecError(Exception):
    """Base class for all engine errors."""


class ProtocolViolation(CecError):
    """The device's response contradicts the protocol (reported as FAIL)."""


class BusPresenceViolation(CecError):
    """Unexpected ack/no-ack while polling (reported as FAIL CRITICAL)."""


class OperatorInputError(CecError):
    """Malformed operator-supplied configuration, rejected before any bus traffic."""


class DuplicateTestCaseError(CecError):
    """Two different test bodies registered under the same case name."""


class TransportError(CecError):
    """The bus driver could not be loaded or failed outside of frame errors."""
