"""Transfer fee: charged to the sender on send, never on request approvals."""

from src.mb_common.cents import apply_bps

TRANSFER_FEE_BPS = 300  # 3%


def calc_transfer_fee(amount: int, fee_bps: int = TRANSFER_FEE_BPS) -> int:
    """Ceiling fee: 10000 cents at 300 bps -> 300 cents."""
    return apply_bps(amount, fee_bps)


def required_sender_balance(amount: int, fee_bps: int = TRANSFER_FEE_BPS) -> int:
    return amount + calc_transfer_fee(amount, fee_bps)
