"""Subtree gate: include the fragment or leave it out without a trace."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from teamgate.core.decision import AccessContext, Decision
from teamgate.models.role import Capability, Role


class ContentGate:
    """Render-or-omit check for a fragment of a view.

    There is no redirect and no denial message. With ``render_nothing_on_deny``
    (the default) both the loading and denied cases render ``None``; otherwise
    they render ``fallback_view``.
    """

    def __init__(
        self,
        context: AccessContext,
        *,
        allowed_roles: Iterable[Role] | None = None,
        required_capability: Capability | None = None,
        fallback_view: Any = None,
        render_nothing_on_deny: bool = True,
    ) -> None:
        self._context = context
        self.allowed_roles = frozenset(allowed_roles) if allowed_roles is not None else None
        self.required_capability = required_capability
        self.fallback_view = fallback_view
        self.render_nothing_on_deny = render_nothing_on_deny

    def decision(self) -> Decision:
        if self._context.loading:
            return Decision.UNKNOWN
        return self._context.check(
            allowed_roles=self.allowed_roles, required_capability=self.required_capability
        ).decision

    def render(self, children: Any) -> Any:
        if self.decision() == Decision.ALLOW:
            return children
        return None if self.render_nothing_on_deny else self.fallback_view
