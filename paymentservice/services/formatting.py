"""
Display formatting for purchase receipts.

Presentation only: the output is meant for people, not for parsing back.
"""

from collections.abc import Sequence
from datetime import datetime

from paymentservice.models.receipt import PurchaseReceipt

NO_PURCHASES = "(No purchases)"
NOT_AVAILABLE = "N/A"


def format_date(value: datetime) -> str:
    """Render a timestamp as e.g. 'Wed May 20 03:40:13 1998'."""
    return f"{value:%a %b} {value.day} {value:%H:%M:%S %Y}"


def receipt_to_string(receipt: PurchaseReceipt) -> str:
    """Format a receipt into a fixed-layout, newline-terminated text block."""
    start = format_date(receipt.start_date) if receipt.start_date else NOT_AVAILABLE
    end = format_date(receipt.end_date) if receipt.end_date else NOT_AVAILABLE
    is_subscription = "true" if receipt.is_subscription else "false"

    return (
        f"Date: {format_date(receipt.purchase_date)}\n"
        f"ID/SKU: {receipt.digital_good_id}/{receipt.digital_good_sku}\n"
        f"PurchaseID/licenseKey: {receipt.purchase_id}/{receipt.license_key}\n"
        f"Metadata: {receipt.purchase_metadata}\n"
        f"ItemState/isSubscription?: {int(receipt.item_state)}/{is_subscription}\n"
        f"Start/End: {start}/{end}\n"
        f"InitialPeriod: {receipt.initial_period}\n"
    )


def format_receipts(receipts: Sequence[PurchaseReceipt]) -> str:
    """
    Format a purchase list for display.

    Blocks keep provider order and are separated by a blank line. An empty
    list renders as NO_PURCHASES.
    """
    if not receipts:
        return NO_PURCHASES
    return "".join(receipt_to_string(receipt) + "\n" for receipt in receipts)
