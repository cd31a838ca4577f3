from .auth import User, Profile, SessionToken
from .catalog import Seller, Product
from .shopping import CartLine, WishlistEntry
from .orders import Order
from .rewards import PointsLedgerEntry
from .offers import Offer
from .custom_requests import CustomRequest

__all__ = [
    'User', 'Profile', 'SessionToken',
    'Seller', 'Product',
    'CartLine', 'WishlistEntry',
    'Order',
    'PointsLedgerEntry',
    'Offer',
    'CustomRequest',
]
