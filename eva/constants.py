"""Marketplace enumerations shared by the portals"""

USER_ROLES = ["USER", "VENDOR", "ADMIN"]

# Role names used by the marketplace user records
MARKETPLACE_ROLES = {"USER": "CLIENT", "VENDOR": "PROFESSIONAL", "ADMIN": "ADMINISTRATOR"}

USER_STATUSES = ["ACTIVE", "INACTIVE", "SUSPENDED"]

INQUIRY_STATUSES = ["NEW", "READ", "REPLIED", "QUOTED", "CLOSED", "ARCHIVED"]

REVIEW_STATUSES = ["PENDING", "APPROVED", "REJECTED", "FLAGGED"]

PROVIDER_STATUSES = ["PENDING", "APPROVED", "SUSPENDED", "REJECTED"]

PLAN_TIERS = ["FREE", "BASIC", "PREMIUM", "ENTERPRISE"]

IMPORT_TYPES = ["providers", "categories", "cities", "culture_tags"]

ANALYTICS_PERIODS = {
    "7d": "Last 7 days",
    "30d": "Last 30 days",
    "90d": "Last 90 days",
    "12m": "Last 12 months",
    "all": "All time",
}

EXPORT_TYPES = ["users", "providers", "bookings", "reviews", "inquiries"]
EXPORT_FORMATS = ["json", "csv"]

SUPPORTED_CURRENCIES = {
    "NGN": "₦",
    "USD": "$",
    "GBP": "£",
    "EUR": "€",
    "GHS": "₵",
    "KES": "KSh",
    "ZAR": "R",
}

MONTHS = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]
