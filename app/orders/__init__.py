"""
Orders application.

Read-only order and catalog data consumed by the returns engine: orders
with their points metadata, order items, and the license key grants sold
under each item. How orders are placed and paid is handled elsewhere.
"""
