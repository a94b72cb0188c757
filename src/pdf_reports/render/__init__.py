"""Hierarchy traversal and PDF rendering for tabular reports.

Submodules:
  instructions -- render instruction models (page, title, table, text, spacing)
  summaries    -- summary rows and textual summary lines for a row set
  hierarchy    -- depth-first walk of a group tree emitting render instructions
  pdf          -- reportlab collaborator turning instructions into PDF bytes
"""
