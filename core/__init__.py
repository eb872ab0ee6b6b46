"""Core (UI-agnostic) suspensions dashboard logic.

This package contains:
- data loading (CSV -> pandas)
- classification of raw violation text and games parsing
- grouping by category / subcategory / suspension length
- filter normalization and application
- page compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
