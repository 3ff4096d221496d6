"""
Order Tracker - spreadsheet-backed order lookup with KYS invoice pricing.
Fetches the published order sheet, finds the row for a customer's order code,
and for self-describing KYS codes computes the itemized invoice.
"""

__version__ = "0.1.0"
