"""Laybuy installment-payment gateway for storefront checkouts."""

__version__ = "1.0.0"
