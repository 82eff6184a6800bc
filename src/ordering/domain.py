"""Ordering bounded context — checkout, order lifecycle and returns.

Converts a submitted cart into a persisted order with server-side pricing,
enforces the admin status state machine, and runs the post-completion
return/refund workflow. Product stock lives here too so that checkout and
return approval mutate orders and inventory inside a single Unit of Work.
"""

from protean.domain import Domain

from ordering.utils.logging import configure_logging, get_logger

configure_logging(log_dir="logs", log_file_prefix="ordering")

logger = get_logger(__name__)

ordering = Domain(name="ordering")
