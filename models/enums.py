"""String enums shared by models, schemas and guards. Stored as plain strings."""
from enum import Enum


class UserRole(str, Enum):
    CUSTOMER = "CUSTOMER"
    VENDOR = "VENDOR"
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"


class UserStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"


class OtpStatus(str, Enum):
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    FAILED = "FAILED"


class OtpPurpose(str, Enum):
    LOGIN = "LOGIN"
    REGISTER = "REGISTER"


class AdminPermission(str, Enum):
    MANAGE_USERS = "MANAGE_USERS"
    MANAGE_VENDORS = "MANAGE_VENDORS"
    MANAGE_PRODUCTS = "MANAGE_PRODUCTS"
    MANAGE_ORDERS = "MANAGE_ORDERS"
    MANAGE_PRESCRIPTIONS = "MANAGE_PRESCRIPTIONS"
    MANAGE_REFUNDS = "MANAGE_REFUNDS"
    MANAGE_COUPONS = "MANAGE_COUPONS"
    MANAGE_CATEGORIES = "MANAGE_CATEGORIES"
    MANAGE_REVIEWS = "MANAGE_REVIEWS"
    MANAGE_PAYOUTS = "MANAGE_PAYOUTS"
    VIEW_ANALYTICS = "VIEW_ANALYTICS"
    MANAGE_SETTINGS = "MANAGE_SETTINGS"
    MANAGE_ADMINS = "MANAGE_ADMINS"


ADMIN_ROLES = (UserRole.ADMIN.value, UserRole.SUPER_ADMIN.value)
