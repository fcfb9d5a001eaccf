"""
Checkout keyboards

The forward button only appears when the current step's data is complete,
and "Place order" is hidden while a submission is pending.
"""

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from bookshop.domain.entities.checkout_session import CheckoutSession, CheckoutStep
from bookshop.domain.value_objects.address import AddressType
from bookshop.domain.value_objects.payment import PaymentMethod
from bookshop.infrastructure.utilities.constants import PaymentSettings
from bookshop.infrastructure.utilities.i18n import tr


def _step_row(session: CheckoutSession, lang: str | None):
    """Step indicator; completed steps are clickable"""
    row = []
    for step in CheckoutStep:
        label = tr(f"STEP_{step.name}", lang)
        if step < session.current_step:
            row.append(InlineKeyboardButton(f"✅ {label}", callback_data=f"co_step_{step.value}"))
        elif step == session.current_step:
            row.append(InlineKeyboardButton(f"▶️ {label}", callback_data="noop"))
        else:
            row.append(InlineKeyboardButton(f"▫️ {label}", callback_data="noop"))
    return row


def _footer(session: CheckoutSession, lang: str | None):
    rows = []
    if session.can_advance():
        rows.append([InlineKeyboardButton(tr("BUTTON_CONTINUE", lang), callback_data="co_next")])
    rows.append(
        [
            InlineKeyboardButton(tr("BUTTON_BACK_TO_CART", lang), callback_data="cart_view"),
            InlineKeyboardButton(tr("BUTTON_CANCEL_CHECKOUT", lang), callback_data="co_cancel"),
        ]
    )
    return rows


def get_login_keyboard(session: CheckoutSession, lang: str | None = None):
    keyboard = [
        _step_row(session, lang),
        [InlineKeyboardButton(tr("BUTTON_SIGN_IN", lang), callback_data="co_login_profile")],
        [InlineKeyboardButton(tr("BUTTON_GUEST", lang), callback_data="co_login_guest")],
    ]
    keyboard.extend(_footer(session, lang))
    return InlineKeyboardMarkup(keyboard)


def get_address_keyboard(session: CheckoutSession, lang: str | None = None):
    keyboard = [_step_row(session, lang)]
    for index, address in enumerate(session.saved_addresses):
        marker = "🔘" if address == session.address else "⚪"
        keyboard.append(
            [
                InlineKeyboardButton(
                    f"{marker} {address.full_name}, {address.city} {address.zip_code}",
                    callback_data=f"co_addr_{index}",
                )
            ]
        )
    keyboard.append([InlineKeyboardButton(tr("BUTTON_NEW_ADDRESS", lang), callback_data="co_addr_new")])
    keyboard.extend(_footer(session, lang))
    return InlineKeyboardMarkup(keyboard)


def get_address_type_keyboard(lang: str | None = None):
    return InlineKeyboardMarkup(
        [
            [
                InlineKeyboardButton(
                    tr(f"ADDRESS_TYPE_{address_type.name}", lang),
                    callback_data=f"co_atype_{address_type.value}",
                )
                for address_type in AddressType
            ]
        ]
    )


def get_payment_keyboard(session: CheckoutSession, lang: str | None = None):
    keyboard = [_step_row(session, lang)]
    selected = session.payment.method if session.payment else None
    for method in PaymentMethod:
        marker = "🔘" if method == selected else "⚪"
        keyboard.append(
            [InlineKeyboardButton(f"{marker} {method.label}", callback_data=f"co_pay_{method.value}")]
        )
    keyboard.extend(_footer(session, lang))
    return InlineKeyboardMarkup(keyboard)


def get_bank_keyboard():
    keyboard = [
        [InlineKeyboardButton(name, callback_data=f"co_bank_{bank_id}")]
        for bank_id, name in PaymentSettings.NETBANKING_BANKS.items()
    ]
    return InlineKeyboardMarkup(keyboard)


def get_wallet_keyboard():
    keyboard = [
        [InlineKeyboardButton(name, callback_data=f"co_wallet_{wallet_id}")]
        for wallet_id, name in PaymentSettings.WALLETS.items()
    ]
    return InlineKeyboardMarkup(keyboard)


def get_review_keyboard(session: CheckoutSession, lang: str | None = None):
    keyboard = [_step_row(session, lang)]
    if session.coupon_code:
        keyboard.append(
            [InlineKeyboardButton(tr("BUTTON_REMOVE_COUPON", lang), callback_data="co_coupon_remove")]
        )
    else:
        keyboard.append([InlineKeyboardButton(tr("BUTTON_APPLY_COUPON", lang), callback_data="co_coupon")])
    if not session.is_pending:
        keyboard.append([InlineKeyboardButton(tr("BUTTON_PLACE_ORDER", lang), callback_data="co_place")])
    keyboard.extend(_footer(session, lang))
    return InlineKeyboardMarkup(keyboard)


def get_checkout_keyboard(session: CheckoutSession, lang: str | None = None):
    """Keyboard for whichever step the session is on"""
    builders = {
        CheckoutStep.LOGIN: get_login_keyboard,
        CheckoutStep.ADDRESS: get_address_keyboard,
        CheckoutStep.PAYMENT: get_payment_keyboard,
        CheckoutStep.REVIEW: get_review_keyboard,
    }
    return builders[session.current_step](session, lang)
