"""Seed the medicine stock with common clinic medicines.

Safe to run repeatedly: existing rows (matched case-insensitively) are left
alone.
"""
from app.db.init_db import init_db
from app.db.session import SessionLocal
from app.models.stock import Stock
from app.services.inventory_service import find_stock

MEDICINES = [
    # name, packs, low threshold, divisible, unit, units per pack
    ("Paracetamol 500mg", 40, 10, True, "TABLET", 10),
    ("Amoxicillin 500mg", 25, 5, True, "CAPSULE", 10),
    ("Cetirizine 10mg", 30, 8, True, "TABLET", 10),
    ("Omeprazole 20mg", 20, 5, True, "CAPSULE", 14),
    ("ORS Sachet", 50, 15, True, "SACHET", 1),
    ("Cough Syrup 100ml", 18, 5, False, "BOTTLE", 1),
    ("Salbutamol Inhaler", 6, 3, False, "OTHER", 1),
    ("Diclofenac Gel 30g", 12, 4, False, "TUBE", 1),
]


def seed_inventory():
    init_db()
    db = SessionLocal()
    try:
        created = 0
        for name, packs, low, divisible, unit, per_pack in MEDICINES:
            if find_stock(db, name):
                continue
            db.add(Stock(
                name=name,
                quantity=packs,
                low_stock_threshold=low,
                is_divisible=divisible,
                dispensing_unit=unit,
                units_per_pack=per_pack,
            ))
            created += 1
        db.commit()
        print(f"✅ Seeded {created} medicines ({len(MEDICINES) - created} already present)")
    finally:
        db.close()


if __name__ == "__main__":
    seed_inventory()
