"""Transactional order creation for the in-store and online channels."""

from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from storefront_api.config.constants import CHANNEL_IN_STORE, CHANNEL_ONLINE, MIN_ITEM_QUANTITY
from storefront_api.core.errors import (
    BusinessRuleViolation,
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
)
from storefront_api.core.logger import setup_logger
from storefront_api.core.monitoring import set_order_context
from storefront_api.db.models import Order
from storefront_api.db.repository import OrderRepository
from storefront_api.integrations.payment import PaymentGateway
from storefront_api.models.order import (
    CreateOnlineOrderRequest,
    CreateStoreOrderRequest,
    OnlineOrderResponse,
    OrderItemRequest,
    StoreOrderResponse,
)
from storefront_api.services.projection import OrderProjector
from storefront_api.services.sequencer import OrderNumberSequencer
from storefront_api.services.stock import StockLedger

logger = setup_logger(__name__)


def order_total(items: Iterable[OrderItemRequest]) -> float:
    """Sum of quantity x unit price over the requested lines."""
    return sum(item.quantity * item.price for item in items)


class OrderBuilder:
    """
    Creates orders as one atomic unit.

    The header, every line and the channel detail row are written in a
    single transaction; any rejection (unknown product, ineligible product,
    insufficient stock, payment failure) rolls the whole order back.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        payment_gateway: Optional[PaymentGateway] = None,
        sequencer: Optional[OrderNumberSequencer] = None,
    ):
        """Initialize builder with a session factory and collaborators."""
        self.session_factory = session_factory
        self.payment_gateway = payment_gateway
        self.sequencer = sequencer or OrderNumberSequencer()

    async def create_in_store_order(
        self, cashier_id: int, request: CreateStoreOrderRequest
    ) -> StoreOrderResponse:
        """
        Create a POS order for a store the cashier is assigned to.

        Args:
            cashier_id: Authenticated cashier's user id
            request: Validated order body

        Returns:
            Projection of the committed order

        Raises:
            NotFoundError: Cashier, store or product does not exist
            PermissionDeniedError: Cashier is not assigned to the store
            BusinessRuleViolation: Product not sellable or out of stock
            PersistenceError: Database write or commit failed
        """
        total = order_total(request.items)

        try:
            async with self.session_factory() as session:
                async with session.begin():
                    repository = OrderRepository(session)

                    cashier = await repository.find_user(cashier_id)
                    if cashier is None:
                        raise NotFoundError("Cashier not found")

                    if not await repository.is_store_user(request.store_id, cashier_id):
                        logger.warning(
                            f"Cashier {cashier_id} is not assigned to store {request.store_id}"
                        )
                        raise PermissionDeniedError("Not allowed to perform this task")

                    store = await repository.find_store(request.store_id)
                    if store is None:
                        raise NotFoundError("Store not found")

                    order = await self._stage_order(
                        repository, CHANNEL_IN_STORE, total, request.items
                    )
                    details = await repository.insert_in_store_order_details(
                        order.id, cashier.id, store.id
                    )

                    response = await OrderProjector(repository).project_store_order(
                        order, details, store
                    )

        except SQLAlchemyError as e:
            logger.error(f"Failed to persist in-store order: {e}", exc_info=True)
            raise PersistenceError() from e

        set_order_context(
            CHANNEL_IN_STORE, order_id=response.id, order_number=response.number,
            store_id=request.store_id,
        )
        logger.info(
            f"Created in-store order {response.number} (id={response.id}) "
            f"store={request.store_id} total={response.total}",
            extra={"order_id": response.id, "order_number": response.number,
                   "channel": CHANNEL_IN_STORE},
        )
        return response

    async def create_online_order(
        self, customer_id: int, request: CreateOnlineOrderRequest
    ) -> OnlineOrderResponse:
        """
        Create a customer order and open a checkout session for it.

        The payment gateway is called before the transaction commits, so a
        failed checkout leaves no order behind.

        Args:
            customer_id: Authenticated customer's user id
            request: Validated order body (``store_id`` is ignored)

        Returns:
            Projection of the committed order, including ``checkout_url``

        Raises:
            NotFoundError: Customer or product does not exist
            BusinessRuleViolation: Product not sellable, hidden or out of stock
            PaymentInitiationError: Gateway did not return a checkout URL
            PersistenceError: Database write or commit failed
        """
        if self.payment_gateway is None:
            raise RuntimeError("Payment gateway not configured")

        total = order_total(request.items)

        try:
            async with self.session_factory() as session:
                async with session.begin():
                    repository = OrderRepository(session)

                    customer = await repository.find_user(customer_id)
                    if customer is None:
                        raise NotFoundError("Customer not found")

                    order = await self._stage_order(
                        repository, CHANNEL_ONLINE, total, request.items, require_visible=True
                    )
                    details = await repository.insert_online_order_details(order.id, customer.id)

                    checkout_url = await self.payment_gateway.create_checkout(
                        amount=order.total,
                        first_name=customer.firstname,
                        last_name=customer.lastname,
                        email=customer.email,
                        tx_ref=str(order.id),
                    )

                    response = await OrderProjector(repository).project_online_order(
                        order, details, checkout_url=checkout_url
                    )

        except SQLAlchemyError as e:
            logger.error(f"Failed to persist online order: {e}", exc_info=True)
            raise PersistenceError() from e

        set_order_context(CHANNEL_ONLINE, order_id=response.id, order_number=response.number)
        logger.info(
            f"Created online order {response.number} (id={response.id}) "
            f"customer={customer_id} total={response.total}",
            extra={"order_id": response.id, "order_number": response.number,
                   "channel": CHANNEL_ONLINE},
        )
        return response

    async def _stage_order(
        self,
        repository: OrderRepository,
        channel: str,
        total: float,
        items: Iterable[OrderItemRequest],
        require_visible: bool = False,
    ) -> Order:
        """Insert the order header and its lines inside the open transaction."""
        number = await self.sequencer.next_number(repository)
        order = await repository.insert_order(number, channel, total)

        ledger = StockLedger(repository.session)
        for item in items:
            await self._stage_item(repository, ledger, order, item, require_visible)

        return order

    async def _stage_item(
        self,
        repository: OrderRepository,
        ledger: StockLedger,
        order: Order,
        item: OrderItemRequest,
        require_visible: bool,
    ) -> None:
        product = await repository.find_product_by_sku(item.sku)
        if product is None:
            raise NotFoundError("Product not found")

        if not product.status or (require_visible and not product.visibility):
            logger.warning(f"Rejected order {order.number}: SKU {item.sku} is not sellable")
            raise BusinessRuleViolation(f"Sorry, you cannot order item SKU: {item.sku}")

        # Lines staged earlier in this order are already flushed and count as sold
        stock = await ledger.stock_for(product.id)
        if item.quantity > stock.remaining:
            logger.warning(
                f"Rejected order {order.number}: SKU {item.sku} requested {item.quantity}, "
                f"remaining {stock.remaining}"
            )
            raise BusinessRuleViolation(
                f"Sorry, insufficient stock for the requested quantity of item SKU: {item.sku}"
            )

        if item.quantity < MIN_ITEM_QUANTITY:
            raise BusinessRuleViolation(
                f"The minimum order quantity for item SKU: {item.sku} is {MIN_ITEM_QUANTITY}"
            )

        await repository.insert_order_item(order.id, product.id, item.quantity, item.price)
