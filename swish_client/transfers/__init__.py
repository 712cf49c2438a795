"""Transfers package."""

from swish_client.transfers.workflow import (
    AmountError,
    TransferWorkflow,
    normalize_amount,
    parse_amount,
)

__all__ = [
    "AmountError",
    "TransferWorkflow",
    "normalize_amount",
    "parse_amount",
]
