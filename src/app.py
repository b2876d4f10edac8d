# src/app.py          <-- keep it at the top level of the ZIP
# Handler path:  app.handler
#
# What it does:
#   • Re-exports the log shipper handler so the Lambda runtime finds it
#     without knowing the package layout

from log_shipper.app import handler

__all__ = ["handler"]
