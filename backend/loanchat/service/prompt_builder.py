# loanchat/service/prompt_builder.py

"""
Product context for the assistant.

Pure: the same product snapshot always renders the same string.
"""

from typing import Optional

from loanchat.model.product import Product


INSTRUCTIONS = """Instructions:
You are a helpful banking assistant specialized in explaining this specific loan product.
Answer the user's question using the details above.
If the user asks about something not in the details, provide a general answer but mention you are referring to general banking principles or ask them to check with the bank.
Keep answers concise and professional."""


def _fmt_number(value) -> str:
    # 10.0 -> "10", 10.5 -> "10.5"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_product_context(product: Optional[Product]) -> str:
    """
    Render a product into the labeled block prepended to the user's message.

    No product -> empty context, the model only sees the raw message.
    """
    if product is None:
        return ""

    processing_fee = (
        f"{_fmt_number(product.processing_fee_pct)}%"
        if product.processing_fee_pct is not None
        else "N/A"
    )

    return f"""Context Code: PRODUCT_DETAILS
Product Name: {product.name}
Bank: {product.bank}
Loan Type: {product.type}
Interest Rate (APR): {_fmt_number(product.rate_apr)}%
Minimum Income Required: {_fmt_number(product.min_income)}
Minimum Credit Score: {product.min_credit_score}
Processing Fee: {processing_fee}
Prepayment Allowed: {"Yes" if product.prepayment_allowed else "No"}
Disbursal Speed: {product.disbursal_speed or "Standard"}

{INSTRUCTIONS}
"""
