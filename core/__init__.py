"""Core (UI-agnostic) sleep dashboard logic.

This package contains:
- deterministic synthetic data (seeded LCG -> employees + sleep records)
- filter normalization
- aggregations (averages, variance, five-number summaries, period buckets)
- page compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
