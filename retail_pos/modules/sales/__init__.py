from .cart import Cart, CartLine
from .controller import SalesController, RegisteredSale
from .payments import PaymentMethod

__all__ = ["Cart", "CartLine", "SalesController", "RegisteredSale", "PaymentMethod"]
