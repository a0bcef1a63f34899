"""Enumerations shared by models and schemas."""

from enum import Enum


class UserType(str, Enum):
    CUSTOMER = "customer"
    BUSINESS = "business"


class BusinessCategory(str, Enum):
    KIRANA = "kirana"
    ELECTRONICS = "electronics"
    CLOTHING = "clothing"
    FOOD = "food"
    SALON = "salon"
    FOOTWEAR = "footwear"
    CAFE = "cafe"
    GIFTS = "gifts"
    PHARMACY = "pharmacy"
    STATIONERY = "stationery"


CATEGORY_LABELS = {
    BusinessCategory.KIRANA: "Kirana / Grocery",
    BusinessCategory.ELECTRONICS: "Electronics / Gadgets",
    BusinessCategory.CLOTHING: "Clothing Store",
    BusinessCategory.FOOD: "Food / Restaurant",
    BusinessCategory.SALON: "Salon / Beauty",
    BusinessCategory.FOOTWEAR: "Footwear",
    BusinessCategory.CAFE: "Cafe / Ice Cream",
    BusinessCategory.GIFTS: "Gift / Toy",
    BusinessCategory.PHARMACY: "Medicine / Wellness / Pharmacy",
    BusinessCategory.STATIONERY: "Stationery / School",
}


class TransactionType(str, Enum):
    EARNED = "earned"
    REDEEMED = "redeemed"


class TransactionSource(str, Enum):
    PURCHASE = "purchase"
    RATING_BONUS = "rating_bonus"
    MANUAL = "manual"
    REDEMPTION = "redemption"
