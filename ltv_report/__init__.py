"""Customer lifetime-value report engine.

Derives searchable, sortable and paginated LTV report views from an uploaded
snapshot, groups a customer's raw transactions by calendar month, and exports
the results as CSV text or a paginated PDF document.
"""

__version__ = "0.1.0"
