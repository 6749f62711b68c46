# Ghana reference tables: regions, mobile money rails, banks and catalog categories.
# Loaded once at import time and never mutated.

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType


@dataclass(frozen=True)
class Region:
    code: str
    name: str
    capital: str
    cities: tuple[str, ...]
    delivery_fee: Decimal
    delivery_zone: str  # metro | regional | remote

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "name": self.name,
            "capital": self.capital,
            "cities": list(self.cities),
            "delivery_fee": float(self.delivery_fee),
            "delivery_zone": self.delivery_zone,
        }


@dataclass(frozen=True)
class MobileMoneyProvider:
    code: str
    name: str
    short_code: str
    color: str
    active: bool = True

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "name": self.name,
            "short_code": self.short_code,
            "color": self.color,
            "active": self.active,
        }


@dataclass(frozen=True)
class Bank:
    code: str
    name: str


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    description: str
    subcategories: tuple[str, ...]


REGIONS: tuple[Region, ...] = (
    Region("greater-accra", "Greater Accra", "Accra", ("Accra", "Tema", "Kasoa", "Madina", "Adenta", "Teshie", "Nungua"), Decimal("5.00"), "metro"),
    Region("ashanti", "Ashanti", "Kumasi", ("Kumasi", "Obuasi", "Ejisu", "Mampong", "Konongo"), Decimal("10.00"), "regional"),
    Region("northern", "Northern", "Tamale", ("Tamale", "Yendi", "Savelugu", "Salaga"), Decimal("15.00"), "remote"),
    Region("western", "Western", "Sekondi-Takoradi", ("Sekondi-Takoradi", "Tarkwa", "Prestea", "Axim"), Decimal("12.00"), "regional"),
    Region("eastern", "Eastern", "Koforidua", ("Koforidua", "Akosombo", "Nkawkaw", "Akim Oda"), Decimal("8.00"), "regional"),
    Region("volta", "Volta", "Ho", ("Ho", "Hohoe", "Keta", "Aflao"), Decimal("12.00"), "regional"),
    Region("central", "Central", "Cape Coast", ("Cape Coast", "Elmina", "Winneba", "Kasoa"), Decimal("10.00"), "regional"),
    Region("upper-east", "Upper East", "Bolgatanga", ("Bolgatanga", "Bawku", "Navrongo"), Decimal("20.00"), "remote"),
    Region("upper-west", "Upper West", "Wa", ("Wa", "Tumu", "Lawra"), Decimal("20.00"), "remote"),
    Region("brong-ahafo", "Brong Ahafo", "Sunyani", ("Sunyani", "Techiman", "Berekum", "Dormaa Ahenkro"), Decimal("12.00"), "regional"),
)

REGION_NAMES: tuple[str, ...] = tuple(r.name for r in REGIONS)

MOBILE_MONEY_PROVIDERS: tuple[MobileMoneyProvider, ...] = (
    MobileMoneyProvider("mtn", "MTN Mobile Money", "*170#", "#FFCC00"),
    MobileMoneyProvider("vodafone", "Vodafone Cash", "*110#", "#E60000"),
    MobileMoneyProvider("airtel_tigo", "AirtelTigo Money", "*100#", "#ED1C24"),
)

# Paystack's short provider codes map onto the canonical ones above
PROVIDER_ALIASES = MappingProxyType({
    "vod": "vodafone",
    "tgo": "airtel_tigo",
})

# Code sent to Paystack's /charge mobile_money.provider field
PAYSTACK_PROVIDER_CODES = MappingProxyType({
    "mtn": "mtn",
    "vodafone": "vod",
    "airtel_tigo": "tgo",
})

BANKS: tuple[Bank, ...] = (
    Bank("gcb", "GCB Bank Limited"),
    Bank("ecobank", "Ecobank Ghana Limited"),
    Bank("absa", "Absa Bank Ghana Limited"),
    Bank("stanbic", "Stanbic Bank Ghana Limited"),
    Bank("standard_chartered", "Standard Chartered Bank Ghana Limited"),
    Bank("fidelity", "Fidelity Bank Ghana Limited"),
    Bank("cal_bank", "CAL Bank Limited"),
    Bank("republic_bank", "Republic Bank Ghana Limited"),
    Bank("access_bank", "Access Bank Ghana Limited"),
)

CATEGORIES: tuple[Category, ...] = (
    Category(
        "groceries", "Groceries & Food", "Fresh produce, local foods, beverages, and pantry items",
        ("Fresh Produce", "Local Foods", "Beverages", "Dairy & Eggs", "Meat & Fish", "Pantry Items", "Spices & Seasonings"),
    ),
    Category(
        "electronics", "Electronics", "Mobile phones, laptops, home appliances, and tech accessories",
        ("Mobile Phones", "Laptops & Computers", "TV & Audio", "Home Appliances", "Gaming", "Smart Devices"),
    ),
    Category(
        "consumables", "Everyday Consumables", "Personal care, health products, and household items",
        ("Personal Care", "Health & Wellness", "Household Items", "Baby Care", "Beauty Products"),
    ),
    Category(
        "fashion", "Fashion & Clothing", "Clothing, shoes, accessories, and traditional wear",
        ("Men's Clothing", "Women's Clothing", "Traditional Wear", "Shoes & Footwear", "Bags & Accessories", "Jewelry"),
    ),
    Category(
        "home_garden", "Home & Garden", "Furniture, home decor, kitchen items, and garden supplies",
        ("Furniture", "Kitchen & Dining", "Home Decor", "Garden & Outdoor"),
    ),
)

CATEGORY_IDS: tuple[str, ...] = tuple(c.id for c in CATEGORIES)

DEFAULT_BUSINESS_HOURS = MappingProxyType({
    "monday": {"open": "08:00", "close": "18:00", "closed": False},
    "tuesday": {"open": "08:00", "close": "18:00", "closed": False},
    "wednesday": {"open": "08:00", "close": "18:00", "closed": False},
    "thursday": {"open": "08:00", "close": "18:00", "closed": False},
    "friday": {"open": "08:00", "close": "18:00", "closed": False},
    "saturday": {"open": "09:00", "close": "16:00", "closed": False},
    "sunday": {"open": "10:00", "close": "14:00", "closed": False},
})

CURRENCY_CODE = "GHS"
CURRENCY_SYMBOL = "₵"
CURRENCY_DECIMALS = 2

DEFAULT_DELIVERY_FEE = Decimal("5.00")

# (min, max, daily) per mobile money transaction, in cedis
MOBILE_MONEY_LIMITS = MappingProxyType({
    "mtn": (Decimal("1"), Decimal("1000"), Decimal("10000")),
    "vodafone": (Decimal("1"), Decimal("1000"), Decimal("10000")),
    "airtel_tigo": (Decimal("1"), Decimal("1000"), Decimal("10000")),
})

# (percentage, cap) per provider
MOBILE_MONEY_FEES = MappingProxyType({
    "mtn": (Decimal("0.01"), Decimal("2.00")),
    "vodafone": (Decimal("0.0095"), Decimal("1.95")),
    "airtel_tigo": (Decimal("0.01"), Decimal("2.00")),
})

PHONE_RE = re.compile(r"^(\+233|0)(20|23|24|26|27|28|50|54|55|56|57|59)\d{7}$")
GPS_CODE_RE = re.compile(r"^[A-Z]{2}-\d{4}-\d{4}$")
