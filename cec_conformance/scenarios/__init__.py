"""Test case bodies grouped by protocol feature area."""

from cec_conformance.registry.registry import TestArea
from cec_conformance.scenarios import (
    cdc,
    core,
    deck_control,
    one_touch_record,
    osd,
    post_test,
    power_status,
    rc_passthrough,
    routing,
    system_info,
    timer_programming,
    tuner_control,
    vendor,
)


def default_areas() -> list[TestArea]:
    """The full catalogue in execution order; post-test checks always come last."""
    return [
        core.AREA,
        power_status.AREA,
        system_info.AREA,
        vendor.AREA,
        osd.TRANSFER_AREA,
        osd.STRING_AREA,
        rc_passthrough.PASSTHROUGH_AREA,
        rc_passthrough.MENU_AREA,
        deck_control.AREA,
        tuner_control.AREA,
        one_touch_record.AREA,
        timer_programming.AREA,
        cdc.AREA,
        routing.AREA,
        post_test.AREA,
    ]


__all__ = ["default_areas"]
