"""Full-page guard: render, redirect, or explain the denial."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from teamgate.config import Config
from teamgate.core.decision import AccessContext, AuthStatus, Decision, DenyReason
from teamgate.events.bus import EventBus
from teamgate.events.types import EventType
from teamgate.models.role import Capability, Role, role_label

logger = logging.getLogger(__name__)

DEFAULT_SIGN_IN_ROUTE = "/auth"


class GuardState(StrEnum):
    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    DENIED = "denied"
    AUTHORIZED = "authorized"


@dataclass(frozen=True)
class LoadingPlaceholder:
    """Neutral view shown while authentication or role resolution is pending."""


@dataclass(frozen=True)
class AccessDeniedView:
    """Default denial explanation. Names the actor's role, never the guarded data."""

    title: str
    message: str
    role: Role

    @property
    def role_label(self) -> str:
        return role_label(self.role)

    @classmethod
    def for_reason(cls, reason: DenyReason, role: Role) -> AccessDeniedView:
        if reason == DenyReason.ROLE:
            return cls(
                title="Access denied",
                message="You don't have permission to access this page.",
                role=role,
            )
        return cls(
            title="Restricted area",
            message="Your role has insufficient permissions for this section.",
            role=role,
        )


@dataclass(frozen=True)
class GuardOutcome:
    state: GuardState
    view: Any = None
    redirect_to: str | None = None
    reason: DenyReason | None = None

    @property
    def is_redirect(self) -> bool:
        return self.redirect_to is not None


class RouteGuard:
    """Decides what a guarded page shows for the context's actor.

    Denial falls back, in order, to ``fallback_route`` (redirect),
    ``fallback_view`` (render) and finally an :class:`AccessDeniedView`.
    """

    def __init__(
        self,
        context: AccessContext,
        *,
        allowed_roles: Iterable[Role] | None = None,
        required_capability: Capability | None = None,
        fallback_route: str | None = None,
        fallback_view: Any = None,
        sign_in_route: str = DEFAULT_SIGN_IN_ROUTE,
        event_bus: EventBus | None = None,
    ) -> None:
        self._context = context
        self.allowed_roles = frozenset(allowed_roles) if allowed_roles is not None else None
        self.required_capability = required_capability
        self.fallback_route = fallback_route
        self.fallback_view = fallback_view
        self.sign_in_route = sign_in_route
        self._event_bus = event_bus

    @classmethod
    def from_config(cls, context: AccessContext, config: Config, **options: Any) -> RouteGuard:
        """Guard whose sign-in redirect comes from configuration."""
        return cls(context, sign_in_route=config.sign_in_route, **options)

    def evaluate(self, content: Any) -> GuardOutcome:
        context = self._context
        if context.auth_status == AuthStatus.PENDING:
            return GuardOutcome(GuardState.LOADING, view=LoadingPlaceholder())
        if context.auth_status == AuthStatus.UNAUTHENTICATED:
            return GuardOutcome(GuardState.UNAUTHENTICATED, redirect_to=self.sign_in_route)

        check = context.check(
            allowed_roles=self.allowed_roles, required_capability=self.required_capability
        )
        if check.decision == Decision.UNKNOWN:
            return GuardOutcome(GuardState.LOADING, view=LoadingPlaceholder())
        if check.decision == Decision.ALLOW:
            return GuardOutcome(GuardState.AUTHORIZED, view=content)

        reason = check.reason or DenyReason.ROLE
        if self.fallback_route:
            return GuardOutcome(GuardState.DENIED, redirect_to=self.fallback_route, reason=reason)
        if self.fallback_view is not None:
            return GuardOutcome(GuardState.DENIED, view=self.fallback_view, reason=reason)
        return GuardOutcome(
            GuardState.DENIED,
            view=AccessDeniedView.for_reason(reason, check.role or Role.MEMBER),
            reason=reason,
        )

    async def enforce(self, content: Any) -> GuardOutcome:
        """Evaluate and publish an ``access.denied`` event on denial."""
        outcome = self.evaluate(content)
        if outcome.state == GuardState.DENIED:
            logger.info(
                "Denied actor %s in team %s (%s check)",
                self._context.actor_id,
                self._context.team_id,
                outcome.reason,
            )
            if self._event_bus is not None:
                await self._event_bus.emit(
                    EventType.ACCESS_DENIED,
                    {
                        "actor_id": self._context.actor_id,
                        "team_id": self._context.team_id,
                        "role": self._context.role,
                        "reason": outcome.reason,
                    },
                )
        return outcome
