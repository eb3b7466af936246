def format_vnd(amount: int | None) -> str:
    """Group thousands with dots: 1250000 -> '1.250.000'"""
    return f"{int(amount or 0):,}".replace(",", ".")


def format_price(price: int | None) -> str:
    """Price as shown on product cards: 1250000 -> '1.250.000 ₫'"""
    return f"{format_vnd(price)} ₫"
