from pharmacare.models.medicine import Medicine
from pharmacare.models.directory import Customer, Supplier, Vendor
from pharmacare.models.user import User
from pharmacare.models.sale import SaleTransaction
from pharmacare.models.purchase import PurchaseTransaction, PurchaseReceipt
from pharmacare.models.cart import CartSession

__all__ = [
    "Medicine",
    "Customer",
    "Supplier",
    "Vendor",
    "User",
    "SaleTransaction",
    "PurchaseTransaction",
    "PurchaseReceipt",
    "CartSession",
]
