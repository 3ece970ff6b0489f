"""Integer arithmetic utilities for cents-based money.

All amounts, fees and balances use int (cents). No float, no Decimal.
Rates are expressed in basis points (100 bps = 1%).
"""


def validate_amount(amount: int) -> None:
    """Validate that an amount is a strictly positive number of cents."""
    if amount <= 0:
        raise ValueError(f"Amount must be greater than 0 cents, got {amount}")


def cents_to_display(cents: int) -> str:
    """Convert cents to display string: 6500 -> '$65.00', -1200 -> '-$12.00'."""
    if cents < 0:
        abs_cents = -cents
        return f"-${abs_cents // 100:,}.{abs_cents % 100:02d}"
    return f"${cents // 100:,}.{cents % 100:02d}"


def cents_to_decimal_str(cents: int) -> str:
    """Provider wire format: 19000 -> '190.00' (no symbol, no separators)."""
    return f"{cents // 100}.{cents % 100:02d}"


def apply_bps(amount: int, rate_bps: int) -> int:
    """Apply a basis-point rate with ceiling division (platform never loses).

    result = ceil(amount * rate_bps / 10000)
    Using integer ceiling: (a + b - 1) // b
    """
    if amount == 0 or rate_bps == 0:
        return 0
    return (amount * rate_bps + 9999) // 10000
