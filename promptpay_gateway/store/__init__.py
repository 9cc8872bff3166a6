"""In-memory custody state."""

from promptpay_gateway.store.order_book import OrderBook

__all__ = ["OrderBook"]
