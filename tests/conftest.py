"""
Test configuration and fixtures for the bookshop checkout
"""

import os
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from bookshop.domain.entities.cart_entity import CartItem
from bookshop.domain.entities.checkout_session import CheckoutSession, CheckoutStep
from bookshop.domain.entities.identity_entity import Identity
from bookshop.domain.services.delivery import DeliveryEstimator, PincodeDirectory
from bookshop.domain.value_objects.address import Address
from bookshop.domain.value_objects.payment import PaymentSelection
from bookshop.infrastructure.configuration.config import Settings, reset_config
from bookshop.infrastructure.container.dependency_injection import reset_container
from bookshop.infrastructure.database.operations import DatabaseManager
from bookshop.infrastructure.repositories.in_memory_cart_repository import (
    InMemoryCartRepository,
)

CUSTOMER_ID = 42


@pytest.fixture(autouse=True)
def mock_env():
    """Mock environment variables for testing"""
    test_env = {
        "BOT_TOKEN": "test_bot_token_123456789_long_enough",
        "DATABASE_URL": "sqlite://",
        "ENVIRONMENT": "test",
        "LOG_LEVEL": "DEBUG",
    }

    with patch.dict(os.environ, test_env, clear=True):
        reset_config()
        reset_container()
        yield test_env
        reset_container()
        reset_config()


@pytest.fixture
def test_config():
    return Settings()


@pytest.fixture
def db_manager(test_config):
    """In-memory SQLite database with the catalog seeded"""
    manager = DatabaseManager(test_config, database_url="sqlite://")
    manager.create_tables()
    manager.seed_books()
    yield manager
    manager.close()


@pytest.fixture
def pincode_directory(test_config):
    return PincodeDirectory.from_file(test_config.pincode_data_path)


@pytest.fixture
def delivery_estimator(pincode_directory):
    return DeliveryEstimator(pincode_directory)


@pytest.fixture
def sample_items():
    return [
        CartItem(id="bk-006", title="Malgudi Days", author="R. K. Narayan", unit_price=15000),
        CartItem(
            id="bk-002", title="The God of Small Things", author="Arundhati Roy", unit_price=20000
        ),
    ]


@pytest.fixture
def cart_repository():
    return InMemoryCartRepository()


@pytest.fixture
async def filled_cart_repository(cart_repository, sample_items):
    """Cart store holding the sample items for CUSTOMER_ID (subtotal 35000)"""
    for item in sample_items:
        await cart_repository.add_item(CUSTOMER_ID, item)
    return cart_repository


@pytest.fixture
def sample_address():
    return Address.create(
        full_name="Asha Rao",
        phone="98765 43210",
        street="12 Temple Road",
        zip_code="751001",
        city="Bhubaneswar",
        state="Odisha",
    )


@pytest.fixture
def review_session(sample_items, sample_address):
    """Session that has collected everything and sits on the review step"""
    session = CheckoutSession.start(CUSTOMER_ID, sample_items, Identity.guest())
    session.select_address(sample_address)
    session.advance()
    session.select_payment(PaymentSelection.create("cod"))
    session.advance()
    assert session.current_step == CheckoutStep.REVIEW
    return session


@pytest.fixture
def mock_context():
    context = MagicMock()
    context.user_data = {}
    return context


@pytest.fixture
def customer_id():
    return CUSTOMER_ID


@pytest.fixture
def make_callback_update():
    """Factory for updates carrying an inline button press"""

    def factory(data: str, user_id: int = CUSTOMER_ID):
        update = MagicMock()
        update.effective_user.id = user_id
        update.effective_user.full_name = "Asha Rao"
        update.callback_query.data = data
        update.callback_query.answer = AsyncMock()
        update.callback_query.edit_message_text = AsyncMock()
        update.callback_query.message.reply_text = AsyncMock()
        return update

    return factory


@pytest.fixture
def make_text_update():
    """Factory for updates carrying a plain text message"""

    def factory(text: str, user_id: int = CUSTOMER_ID):
        update = MagicMock()
        update.effective_user.id = user_id
        update.effective_user.full_name = "Asha Rao"
        update.callback_query = None
        update.message.text = text
        update.message.reply_text = AsyncMock()
        return update

    return factory
