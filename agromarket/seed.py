# agromarket/seed.py
from __future__ import annotations

import random
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional

from agromarket import schemas
from agromarket.analysis import diseased_analysis, healthy_analysis, jitter_location

SEED_SPREAD_DEG = 5.0

# name, type, image, address, quantity, price_per_unit, healthy
SEED_CROPS: List[tuple] = [
    ("Organic Wheat", "Wheat", "https://images.unsplash.com/photo-1574323347407-f5e1ad6d020b?w=800",
     "Village Rampur, Meerut, Uttar Pradesh", 500, 2500, True),
    ("Basmati Rice", "Rice", "https://images.unsplash.com/photo-1586201375761-83865001e31c?w=800",
     "Village Kheri, Patiala, Punjab", 300, 4500, True),
    ("Sweet Corn", "Corn", "https://images.unsplash.com/photo-1551754655-cd27e38d2076?w=800",
     "Village Sultanpur, Karnal, Haryana", 200, 1800, True),
    ("Fresh Tomatoes", "Tomato", "https://images.unsplash.com/photo-1546094096-0df4bcaaa337?w=800",
     "Village Nashik, Maharashtra", 150, 2000, True),
    ("Organic Potatoes", "Potato", "https://images.unsplash.com/photo-1518977676601-b53f82aba655?w=800",
     "Village Agra, Uttar Pradesh", 400, 1200, True),
    ("Red Onions", "Onion", "https://images.unsplash.com/photo-1618512496248-a07fe83aa8cb?w=800",
     "Village Lasalgaon, Nashik, Maharashtra", 250, 1500, True),
    ("Fresh Carrots", "Carrot", "https://images.unsplash.com/photo-1598170845058-32b9d6a5da37?w=800",
     "Village Pune, Maharashtra", 100, 2200, True),
    ("Green Cabbage", "Cabbage", "https://images.unsplash.com/photo-1594282486552-05b4d80fbb9f?w=800",
     "Village Ooty, Tamil Nadu", 180, 1600, True),
    ("Infected Wheat Crop", "Wheat", "https://images.unsplash.com/photo-1625246333195-78d9c38ad449?w=800",
     "Village Ludhiana, Punjab", 600, 1800, False),
    ("Diseased Wheat", "Wheat", "https://images.unsplash.com/photo-1628088062854-d1870b4553da?w=800",
     "Village Meerut, Uttar Pradesh", 400, 1600, False),
    ("Premium Rice", "Rice", "https://images.unsplash.com/photo-1536304993881-ff6e9eefa2a6?w=800",
     "Village Thanjavur, Tamil Nadu", 350, 4200, True),
    ("Infected Corn", "Corn", "https://images.unsplash.com/photo-1633436375096-2b2cd9926c7e?w=800",
     "Village Davangere, Karnataka", 220, 1400, False),
    ("Healthy Yellow Corn", "Corn", "https://images.unsplash.com/photo-1603048588665-791ca8aea617?w=800",
     "Village Bangalore, Karnataka", 280, 1900, True),
    ("Cherry Tomatoes", "Tomato", "https://images.unsplash.com/photo-1592924357228-91a4daadcfea?w=800",
     "Village Bangalore, Karnataka", 80, 3500, True),
    ("Baby Potatoes", "Potato", "https://images.unsplash.com/photo-1552874869-5c39ec9288dc?w=800",
     "Village Shimla, Himachal Pradesh", 120, 2800, True),
    ("White Onions", "Onion", "https://images.unsplash.com/photo-1587486913049-53fc88980cfc?w=800",
     "Village Indore, Madhya Pradesh", 200, 1400, True),
    ("Organic Carrots", "Carrot", "https://images.unsplash.com/photo-1582515073490-39981397c445?w=800",
     "Village Dehradun, Uttarakhand", 90, 2500, True),
]


def seed_records() -> Iterable[Dict[str, Any]]:
    """Yield the demo catalogue as normalized dicts."""
    for name, ctype, image_url, address, quantity, price, healthy in SEED_CROPS:
        yield {
            "name": name,
            "type": ctype,
            "image_url": image_url,
            "address": address,
            "quantity": float(quantity),
            "unit": "quintal",
            "price_per_unit": float(price),
            "is_healthy": healthy,
        }


def build_seed_payloads(
    today: date,
    rng: Optional[random.Random] = None,
) -> List[schemas.CropCreate]:
    """Published listings harvested 15 to 74 days after `today`."""
    rng = rng or random.Random()
    payloads: List[schemas.CropCreate] = []
    for r in seed_records():
        harvest = today + timedelta(days=rng.randint(15, 74))
        payloads.append(
            schemas.CropCreate(
                name=r["name"],
                type=r["type"],
                image_url=r["image_url"],
                location=jitter_location(r["address"], rng, spread=SEED_SPREAD_DEG),
                harvest_date=harvest.isoformat(),
                quantity=r["quantity"],
                unit=r["unit"],
                price_per_unit=r["price_per_unit"],
                disease_analysis=healthy_analysis() if r["is_healthy"] else diseased_analysis(),
                published=True,
            )
        )
    return payloads
