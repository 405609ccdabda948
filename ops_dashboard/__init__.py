"""
Core package for the operations dashboard.

Submodules provide sheet loading, relational hydration, the cascading filter
engine, KPI aggregation and the Streamlit rendering helpers orchestrated by
the top-level `app.py`.
"""
