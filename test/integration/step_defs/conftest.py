"""Shared fixtures, context and steps for BDD step definitions."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

import pytest
from pytest_bdd import given, parsers, then

from app import PortalFacade
from domain.models import Role, User
from domain.services import SubmitOutcome
from test.mocks import (
    FakeApiClient,
    InMemoryLogger,
    InMemorySessionRepository,
    RecordingNotifier,
    user_payload,
)


@dataclass
class PortalContext:
    """Holds mutable state shared across BDD steps."""

    api: FakeApiClient = field(default_factory=FakeApiClient)
    notifier: RecordingNotifier = field(default_factory=RecordingNotifier)
    logger: InMemoryLogger = field(default_factory=InMemoryLogger)
    repository: InMemorySessionRepository = field(default_factory=InMemorySessionRepository)
    facade: PortalFacade | None = None
    outcome: SubmitOutcome | None = None
    calls_before_submit: int = 0

    @property
    def portal(self) -> PortalFacade:
        if self.facade is None:
            self.facade = PortalFacade(
                api=self.api,
                notifier=self.notifier,
                logger=self.logger,
                repository=self.repository,
            )
            self.facade.start()
        return self.facade

    def open(self, path: str) -> str:
        return asyncio.run(self.portal.open_screen(path))

    def submit(self, form_name: str, values: dict, **kwargs) -> SubmitOutcome:
        self.calls_before_submit = len(self.api.calls)
        self.outcome = asyncio.run(self.portal.submit_form(form_name, values, **kwargs))
        return self.outcome


@pytest.fixture()
def ctx() -> PortalContext:
    return PortalContext()


def sign_in(ctx: PortalContext, role: str) -> None:
    """Seed the session repository so the facade starts signed in."""
    if role != "none":
        ctx.repository.save_identity(User.from_payload(user_payload(role=role)))


# -- shared steps ------------------------------------------------------------


@given(parsers.parse('a signed-in "{role}"'))
def given_signed_in(ctx: PortalContext, role: str) -> None:
    sign_in(ctx, role)


@then("the submission succeeds")
def then_submission_succeeds(ctx: PortalContext) -> None:
    assert ctx.outcome is not None and ctx.outcome.ok, ctx.outcome


@then("the submission fails")
def then_submission_fails(ctx: PortalContext) -> None:
    assert ctx.outcome is not None and not ctx.outcome.ok


@then(parsers.parse('the current screen is "{path}"'))
def then_current_screen(ctx: PortalContext, path: str) -> None:
    assert ctx.portal.current_path == path


@then(parsers.parse('the user is told "{message}"'))
def then_user_told(ctx: PortalContext, message: str) -> None:
    assert ctx.notifier.errors[-1] == message


@then(parsers.parse('the field "{name}" shows "{message}"'))
def then_field_error(ctx: PortalContext, name: str, message: str) -> None:
    assert ctx.outcome is not None
    assert ctx.outcome.error.field_errors[name] == message


@then("no request was sent")
def then_no_request(ctx: PortalContext) -> None:
    assert ctx.api.calls[ctx.calls_before_submit:] == []


@then(parsers.parse('the session role is "{role}"'))
def then_session_role(ctx: PortalContext, role: str) -> None:
    assert ctx.portal.session.role is Role(role)


@then("nobody is signed in")
def then_signed_out(ctx: PortalContext) -> None:
    assert ctx.portal.identity is None
    assert ctx.repository.load_identity() is None
