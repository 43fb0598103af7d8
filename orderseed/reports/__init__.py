"""Sales reports."""

from orderseed.reports.sales import sales_report, summarize_batch, x_report, z_report

__all__ = ["sales_report", "summarize_batch", "x_report", "z_report"]
