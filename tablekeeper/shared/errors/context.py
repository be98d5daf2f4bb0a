"""Context variables for error handling.

Re-exports from shared.context for consistency.
"""

from tablekeeper.shared.context import trace_id_var

__all__ = ["trace_id_var"]
