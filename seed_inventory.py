"""
Seed script: loads the demo bar inventory.
Run: python seed_inventory.py [--keep]

Without --keep the inventory table is cleared first. The script writes
straight to the database, not through the change feed; a running server
picks the rows up on the next alert request because the board regenerates
whenever an item is newer than its last refresh.
"""
import sys

from smart_inventory.database import SessionLocal, init_db
from smart_inventory.models import InventoryItem
from smart_inventory.services.alert_service import count_alerts, generate_alerts
from smart_inventory.services.stock_classifier import resolve_priority

# ── Demo catalog: (name, category, stock) ─────────────────────────────────
PRODUCTS = [
    ("Absolut Vodka", "Spirits", 5),
    ("Jack Daniel's", "Spirits", 3),
    ("Cabernet Sauvignon", "Wines", 8),
    ("Corona Beer", "Beers", 24),
    ("Coca Cola", "Soft Drinks", 36),
    ("Simple Syrup", "Syrups", 2),
    ("Tanqueray Gin", "Spirits", 1),
    ("Prosecco", "Wines", 2),
    ("Heineken", "Beers", 6),
    ("Tonic Water", "Soft Drinks", 10),
]


def seed(keep: bool = False):
    init_db()
    db = SessionLocal()

    if not keep:
        db.query(InventoryItem).delete()
        db.commit()

    items = []
    for name, category, stock in PRODUCTS:
        config = resolve_priority(category)
        items.append(InventoryItem(
            name=name,
            category=category,
            stock=stock,
            priority=config.priority.value,
            alert_threshold=config.threshold,
            updated_by="seed",
        ))

    db.add_all(items)
    db.commit()
    print(f"✓ Seeded {len(items)} inventory items")

    # Summary
    cats = {}
    for it in items:
        cats[it.category] = cats.get(it.category, 0) + 1
    for cat, count in sorted(cats.items()):
        print(f"  {cat}: {count} items")

    counts = count_alerts(generate_alerts(items))
    print(f"  Urgent: {counts['urgent']}, Normal: {counts['normal']}, Info: {counts['info']}")
    db.close()


if __name__ == "__main__":
    seed(keep="--keep" in sys.argv[1:])
