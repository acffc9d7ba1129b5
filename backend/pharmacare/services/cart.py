"""
Point-of-sale cart: an in-memory list of line items with a small state machine.

States:
    empty            -> no lines
    populated        -> at least one line, editable
    checkout_pending -> total frozen for confirmation; lines cannot change
    committing       -> checkout in progress

The total is always recomputed from the current lines. Stock snapshots taken
at add time bound increments softly; they are never re-checked against live
stock here (checkout does the authoritative check).
"""
from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Iterable, List, Optional

from pharmacare.core.exceptions import BarcodeNotFoundError, CartStateError, ValidationError

EMPTY = "empty"
POPULATED = "populated"
CHECKOUT_PENDING = "checkout_pending"
COMMITTING = "committing"
CART_STATES = (EMPTY, POPULATED, CHECKOUT_PENDING, COMMITTING)


@dataclass
class CartLine:
    medicine_id: int
    name: str
    unit_price: Decimal
    quantity: int = 1
    stock_at_add: Optional[int] = None

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def to_dict(self) -> dict:
        data = asdict(self)
        data["unit_price"] = str(self.unit_price)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "CartLine":
        return cls(
            medicine_id=int(data["medicine_id"]),
            name=data.get("name", ""),
            unit_price=Decimal(str(data["unit_price"])),
            quantity=int(data.get("quantity", 1)),
            stock_at_add=data.get("stock_at_add"),
        )


class Cart:
    def __init__(self, lines: Iterable[CartLine] = (), state: Optional[str] = None):
        self.lines: List[CartLine] = list(lines)
        if state is None or state not in CART_STATES:
            state = POPULATED if self.lines else EMPTY
        self.state = state

    # ---- derived state ----

    @property
    def total(self) -> Decimal:
        return sum((line.line_total for line in self.lines), Decimal("0"))

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    def is_empty(self) -> bool:
        return not self.lines

    def get_line(self, medicine_id: int) -> Optional[CartLine]:
        for line in self.lines:
            if line.medicine_id == medicine_id:
                return line
        return None

    # ---- transitions ----

    def _require_editable(self) -> None:
        if self.state in (CHECKOUT_PENDING, COMMITTING):
            raise CartStateError(f"Cart cannot be edited while {self.state.replace('_', ' ')}")

    def _settle(self) -> None:
        self.state = POPULATED if self.lines else EMPTY

    def add(self, medicine) -> CartLine:
        """Insert a line at quantity 1 or bump an existing line by 1.

        `medicine` is anything with id, name, price and stock attributes.
        Raises CartStateError when the line already holds every unit that was
        in stock when it was added.
        """
        self._require_editable()
        line = self.get_line(medicine.id)
        if line is None:
            stock = getattr(medicine, "stock", None)
            if stock is not None and stock <= 0:
                raise CartStateError(f"{medicine.name} is out of stock")
            line = CartLine(
                medicine_id=medicine.id,
                name=medicine.name,
                unit_price=Decimal(str(medicine.price)),
                quantity=1,
                stock_at_add=stock,
            )
            self.lines.append(line)
        else:
            self._increment(line, 1)
        self._settle()
        return line

    def add_by_barcode(self, code: str, catalog: Iterable) -> CartLine:
        """Add the catalog item whose barcode equals `code` exactly.

        No trimming or case folding. No match leaves the cart unchanged.
        """
        for medicine in catalog:
            barcode = getattr(medicine, "barcode", None)
            if barcode is not None and barcode == code:
                return self.add(medicine)
        raise BarcodeNotFoundError(code)

    def _increment(self, line: CartLine, delta: int) -> None:
        new_qty = line.quantity + delta
        if delta > 0 and line.stock_at_add is not None and new_qty > line.stock_at_add:
            raise CartStateError(f"Only {line.stock_at_add} of {line.name} in stock")
        line.quantity = new_qty

    def change_quantity(self, medicine_id: int, delta: int) -> Optional[CartLine]:
        """Adjust a line by delta. Reaching zero (or below) removes the line."""
        self._require_editable()
        if isinstance(delta, bool) or not isinstance(delta, int):
            raise ValidationError("Quantity change must be an integer")
        line = self.get_line(medicine_id)
        if line is None:
            raise ValidationError(f"Medicine {medicine_id} is not in the cart")
        if line.quantity + delta <= 0:
            self.lines.remove(line)
            self._settle()
            return None
        self._increment(line, delta)
        self._settle()
        return line

    def remove(self, medicine_id: int) -> None:
        self._require_editable()
        self.lines = [line for line in self.lines if line.medicine_id != medicine_id]
        self._settle()

    def clear(self) -> None:
        self.lines = []
        self.state = EMPTY

    def begin_checkout(self) -> Decimal:
        """Populated -> checkout_pending. Returns the total to confirm."""
        if self.state != POPULATED:
            raise CartStateError("Nothing to check out" if self.state == EMPTY else f"Checkout already {self.state.replace('_', ' ')}")
        self.state = CHECKOUT_PENDING
        return self.total

    def cancel_checkout(self) -> None:
        # also releases a cart left in committing by an interrupted checkout
        if self.state in (CHECKOUT_PENDING, COMMITTING):
            self._settle()

    def begin_commit(self) -> None:
        if self.state != CHECKOUT_PENDING:
            raise CartStateError("Confirm the checkout total before paying")
        self.state = COMMITTING

    def abort_commit(self) -> None:
        """Committing -> checkout_pending after a failed checkout; lines untouched."""
        self.state = CHECKOUT_PENDING if self.lines else EMPTY

    # ---- persistence ----

    def to_payload(self) -> list:
        return [line.to_dict() for line in self.lines]

    @classmethod
    def from_payload(cls, payload: Optional[list], state: Optional[str] = None) -> "Cart":
        return cls((CartLine.from_dict(d) for d in (payload or [])), state=state)

    def __eq__(self, other):
        if not isinstance(other, Cart):
            return NotImplemented
        return self.state == other.state and self.to_payload() == other.to_payload()

    def __repr__(self):
        return f"<Cart state={self.state} lines={len(self.lines)} total={self.total}>"
