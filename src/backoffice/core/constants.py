"""Application-wide constants.

This module defines constants used throughout the application
to avoid magic numbers and ensure consistency.
"""

# String field lengths
MAX_USERNAME_LENGTH = 50
MAX_EMAIL_LENGTH = 255
MAX_NAME_LENGTH = 100
MAX_ROLE_NAME_LENGTH = 50
MAX_DESCRIPTION_LENGTH = 255
MAX_WISHLIST_NAME_LENGTH = 100
MAX_PRODUCT_NAME_LENGTH = 255
MAX_CATEGORY_NAME_LENGTH = 100
MAX_SLUG_LENGTH = 255
MAX_SKU_LENGTH = 100
MAX_ORDER_NUMBER_LENGTH = 50
MAX_METHOD_LENGTH = 50

# Password requirements
MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 128
BCRYPT_MIN_ROUNDS = 4

# Pagination defaults
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# Orders
ORDER_NUMBER_PREFIX = "ORD-"
EXPRESS_SHIPPING_METHOD = "express"
DEFAULT_PAYMENT_METHOD = "credit_card"
DRAFT_NUMBER_PREFIX = "DFT-"

# Wishlists
DEFAULT_WISHLIST_NAME = "My Wishlist"
DEFAULT_WISHLIST_DESCRIPTION = "Default wishlist"

# Secret key requirements
MIN_SECRET_KEY_LENGTH = 32
DEFAULT_INSECURE_SECRET = "change-me-in-production"
