from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

PLACEHOLDER = "-"


def to_rupiah(value):
    """
    Coerces a price to whole Rupiah, rounding halves away from zero.

    :param value: The price (int, float or numeric string).
    :return: The amount as an int.
    :raises ValueError: If the value is not a finite number.
    """
    try:
        amount = Decimal(str(value).strip())
        return int(amount.quantize(Decimal(1), rounding=ROUND_HALF_UP))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Invalid price {value!r}") from e


def format_price(value):
    """
    Formats a price the way the id-ID locale renders Rupiah.

    Zero fractional digits, dots as thousands separators and no space
    after the currency symbol, e.g. 12000000 -> "Rp12.000.000".

    :param value: The price (int, float or numeric string).
    :return: The formatted string, or the original value as a string
             if it is not numeric.
    """
    try:
        amount = to_rupiah(value)
    except ValueError:
        return str(value)

    sign = "-" if amount < 0 else ""
    grouped = f"{abs(amount):,}".replace(",", ".")
    return f"{sign}Rp{grouped}"
