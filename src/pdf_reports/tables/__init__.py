"""Tabular data model, typed comparison/formatting, and the grouping engine.

Submodules:
  patterns     -- compiled regex patterns and constant tuples
  columns      -- ColumnKey resolution (index or case-insensitive name)
  coercion     -- missing-value, text, numeric, and date coercion helpers
  schema       -- ColumnSchema / Table / LevelConfig Pydantic models
  compare      -- typed value comparison used by every sort
  formatting   -- typed display formatting and per-column CellFormatter
  organize     -- DataOrganizer: sort, single/multi-level grouping, aggregates
"""
