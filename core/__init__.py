"""Core (UI-agnostic) course dashboard logic.

This package contains:
- record model and LivingApps reference resolution
- data loading (LivingApps REST -> records)
- aggregations (counts, revenue, capacity, per-instructor courses)
- overview payload (JSON-serializable) and chart helpers (Altair -> Vega-Lite spec dict)
"""
