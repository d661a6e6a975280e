"""Route-level and content-level enforcement of access decisions."""

from teamgate.enforce.content_gate import ContentGate
from teamgate.enforce.route_guard import AccessDeniedView, GuardOutcome, GuardState, RouteGuard

__all__ = ["AccessDeniedView", "ContentGate", "GuardOutcome", "GuardState", "RouteGuard"]
