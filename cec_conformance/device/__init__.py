"""Remote device model, discovery and power precondition."""

from cec_conformance.device.model import RemoteDevice, RemoteDeviceTable

__all__ = ["RemoteDevice", "RemoteDeviceTable"]
