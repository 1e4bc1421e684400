"""Core business logic layer.

Subpackages:
- payday: working days and pay cycles
- bills: recurring bill occurrences
- stock: usage rates, run-out forecasts and reorder timing
- investments: daily value estimates and projections
- nutrition: BMR/TDEE and macro targets
- mealplan: shopping week windows
- tracking: parcel status mapping and shipment workflows

Everything here is pure date/number logic apart from tracking.shipments,
which drives the repositories and the TrackingMore client.
"""
__all__ = ["payday", "bills", "stock", "investments", "nutrition", "mealplan", "tracking"]
