"""Seed a demo catalog, the customer/supplier/vendor directories and two purchases.

Safe to re-run: does nothing when the catalog already has medicines.
"""
from datetime import date
from decimal import Decimal

from pharmacare.db.init_db import init_db
from pharmacare.db.session import SessionLocal
from pharmacare.models import Customer, Medicine, PurchaseReceipt, PurchaseTransaction, Supplier, Vendor
from pharmacare.services.codes import generate_barcode
from pharmacare.services.transaction_service import line_total, record_purchase

MEDICINES = [
    {"name": "Paracetamol", "manufacturer": "PharmaCorp", "price": "9.99", "stock": 150,
     "expiry_date": date(2025, 12, 31), "category": "Pain Relief"},
    {"name": "Amoxicillin", "manufacturer": "MediLabs", "price": "24.99", "stock": 80,
     "expiry_date": date(2025, 6, 30), "category": "Antibiotics"},
    {"name": "Omeprazole", "manufacturer": "HealthCare Inc", "price": "19.99", "stock": 100,
     "expiry_date": date(2025, 9, 30), "category": "Digestive Health"},
]

CUSTOMERS = [
    {"name": "John Smith", "email": "john.smith@email.com", "phone": "(555) 123-4567",
     "address": "123 Main St, Anytown, USA", "last_purchase": date(2024, 3, 15),
     "total_purchases": Decimal("1250.50")},
    {"name": "Sarah Johnson", "email": "sarah.j@email.com", "phone": "(555) 987-6543",
     "address": "456 Oak Ave, Somewhere, USA", "last_purchase": date(2024, 3, 14),
     "total_purchases": Decimal("850.75")},
]

SUPPLIERS = [
    {"name": "PharmaCorp Supplies", "email": "orders@pharmacorp.com", "phone": "(555) 111-2233",
     "address": "789 Industry Blvd, Business City, USA", "products": ["Pain Relief", "Antibiotics"],
     "last_delivery": date(2024, 3, 10)},
    {"name": "MediLabs Distribution", "email": "supply@medilabs.com", "phone": "(555) 444-5566",
     "address": "321 Commerce St, Trade City, USA", "products": ["Antibiotics", "Digestive Health"],
     "last_delivery": date(2024, 3, 12)},
]

VENDORS = [
    {"name": "Medical Equipment Co", "email": "sales@medequip.com", "phone": "(555) 777-8899",
     "address": "159 Tech Road, Innovation City, USA", "category": "Equipment", "status": "active"},
    {"name": "Healthcare Packaging", "email": "orders@hcpackaging.com", "phone": "(555) 000-1122",
     "address": "753 Package Lane, Box Town, USA", "category": "Packaging", "status": "active"},
]


def seed_catalog():
    init_db()
    db = SessionLocal()
    try:
        if db.query(Medicine).count() > 0:
            print("✓ Catalog already seeded")
            return

        medicines = []
        for data in MEDICINES:
            medicine = Medicine(**{**data, "price": Decimal(data["price"])}, barcode=generate_barcode())
            db.add(medicine)
            db.flush()
            medicines.append(medicine)
        db.add_all(Customer(**data) for data in CUSTOMERS)
        suppliers = [Supplier(**data) for data in SUPPLIERS]
        db.add_all(suppliers)
        db.add_all(Vendor(**data) for data in VENDORS)
        db.flush()

        # Historical delivery: its quantity is already part of the seeded stock,
        # so the rows are written directly instead of going through record_purchase.
        received = PurchaseTransaction(
            medicine_id=medicines[0].id,
            supplier_id=suppliers[0].id,
            quantity=200,
            unit_price=Decimal("7.50"),
            total_amount=line_total(200, "7.50"),
            invoice_number="INV-2024-001",
            date=date(2024, 3, 10),
            status="received",
        )
        db.add(received)
        db.flush()
        db.add(PurchaseReceipt(
            purchase_id=received.id,
            medicine_id=received.medicine_id,
            supplier_id=received.supplier_id,
            quantity=received.quantity,
            unit_price=received.unit_price,
            total_amount=received.total_amount,
            invoice_number=received.invoice_number,
            type="purchase",
        ))
        db.commit()

        record_purchase(
            db,
            medicine_id=medicines[1].id,
            quantity=150,
            unit_price="18.75",
            supplier_id=suppliers[1].id,
            invoice_number="INV-2024-002",
            status="pending",
            date=date(2024, 3, 12),
        )

        print(f"✅ Seeded {len(medicines)} medicines, {len(CUSTOMERS)} customers, "
              f"{len(suppliers)} suppliers, {len(VENDORS)} vendors, 2 purchases")
        for m in medicines:
            print(f"   {m.name:<12} barcode {m.barcode}  stock {m.stock}")
    finally:
        db.close()


if __name__ == "__main__":
    seed_catalog()
