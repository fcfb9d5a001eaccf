"""
Per-user conversation state kept in ``context.user_data``
"""

# Key holding the user's CheckoutSession
CHECKOUT_SESSION = "checkout_session"

# Key naming which free-text answer the bot is waiting for
AWAITING_INPUT = "awaiting_input"

# Partially entered address form
ADDRESS_FORM = "address_form"

# Values for AWAITING_INPUT
AWAITING_ADDRESS = "address"
AWAITING_UPI = "upi"
AWAITING_CARD = "card"
AWAITING_COUPON = "coupon"

# Address form questions in the order they are asked
ADDRESS_FIELDS = ("full_name", "phone", "street", "landmark", "zip_code", "city", "state")
