"""Low-level infrastructure and plumbing.

Public API: log_dispatch
"""

from wp_abilities.infra.audit_log import log_dispatch

__all__ = ["log_dispatch"]
