"""
Prefect flows for reports and cache maintenance.

Flows:
- compute: heat-units (seasons report per location) and trial-aggregation
  (per-plot totals), saved under data/derived/
- backfill: pre-fill the weather cache from the Open-Meteo archive

Usage (local):
    python -m fieldheat.flows.compute field-1 2024
    python -m fieldheat.flows.backfill

Usage (Prefect):
    prefect server start  # Optional, for dashboard
    prefect deployment run 'backfill-weather/default'
"""
