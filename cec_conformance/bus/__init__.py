"""Bus access: transport interface, message codec and the exchange primitive."""

from cec_conformance.bus.exchange import Exchange, ExchangeOutcome
from cec_conformance.bus.polling import await_condition
from cec_conformance.bus.transport import BusMode, Transport, TxStatus, load_transport

__all__ = [
    "BusMode",
    "Exchange",
    "ExchangeOutcome",
    "Transport",
    "TxStatus",
    "await_condition",
    "load_transport",
]
