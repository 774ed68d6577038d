from __future__ import annotations

import string
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from domain.errors import (
    DuplicateSubmission,
    MalformedPayload,
    ServerRejected,
    SubmitError,
    TransportFailure,
    ValidationFailed,
)
from domain.forms import FORMS, BodyEncoding, FormSpec, SuccessEffect
from domain.models import ApiResponse, Company, JobPosting, User
from domain.ports import ApiClientPort, FormPart, LoggerPort, NavigatorPort, NotifierPort
from domain.services.entity_caches import EntityCaches
from domain.services.session_store import SessionStore
from domain.utils import split_csv
from domain.validation import FieldType, ValidationContext

ContextProvider = Callable[[], ValidationContext]

_RESULT_PARSERS: dict[SuccessEffect, Callable[[Any], Any]] = {
    SuccessEffect.SET_IDENTITY: User.from_payload,
    SuccessEffect.UPSERT_COMPANY: Company.from_payload,
    SuccessEffect.UPSERT_JOB: JobPosting.from_payload,
}


class FormDraft:
    """
    In-progress state of one form on one screen.

    Holds the raw field values, the current per-field errors and the
    in-flight flag that keeps a second submission of the same draft from
    reaching the network while the first is pending.
    """

    def __init__(
        self,
        form: FormSpec,
        *,
        initial: Mapping[str, Any] | None = None,
        path_params: Mapping[str, str] | None = None,
        origin_path: str | None = None,
        context_provider: ContextProvider | None = None,
    ) -> None:
        params = dict(path_params or {})
        needed = {name for _, name, _, _ in string.Formatter().parse(form.path) if name}
        missing = needed - set(params)
        if missing:
            raise ValueError(f"{form.name} needs path params: {', '.join(sorted(missing))}")

        self.form = form
        self.values: dict[str, Any] = dict(initial or {})
        self.errors: dict[str, str] = {}
        self.touched: set[str] = set()
        self.path_params = params
        self.origin_path = origin_path
        self.submission_in_flight = False
        self.disposed = False
        self._context_provider = context_provider or ValidationContext

    @property
    def name(self) -> str:
        return self.form.name

    @property
    def can_submit(self) -> bool:
        return not self.errors and not self.submission_in_flight

    @property
    def visible_errors(self) -> dict[str, str]:
        return {name: msg for name, msg in self.errors.items() if name in self.touched}

    def set_value(self, name: str, value: Any) -> str | None:
        self.form.schema.get_field(name)
        self.values[name] = value
        self.touched.add(name)
        self.validate()
        return self.errors.get(name)

    def validate(self) -> dict[str, str]:
        self.errors = self.form.schema.validate(self.values, self._context_provider())
        return dict(self.errors)

    def dispose(self) -> None:
        self.disposed = True


@dataclass(frozen=True)
class SubmitOutcome:
    form_name: str
    result: Any = None
    message: str | None = None
    error: SubmitError | None = None
    redirected_to: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def build_json_body(form: FormSpec, values: Mapping[str, Any]) -> dict[str, Any]:
    return {spec.name: values.get(spec.name) for spec in form.schema.fields}


def build_form_parts(form: FormSpec, values: Mapping[str, Any]) -> list[FormPart]:
    parts: list[FormPart] = []
    for spec in form.schema.fields:
        value = values.get(spec.name)
        if value is None:
            continue
        if spec.type is FieldType.FILE:
            parts.append((spec.name, value))
        elif spec.is_list:
            parts.append((spec.name, ",".join(split_csv(str(value)))))
        else:
            parts.append((spec.name, str(value)))
    return parts


class FormSubmissionPipeline:
    """
    Generic validate → serialize → send → interpret → mutate → navigate flow.

    Every create/update screen submits through here. Failures of any kind end
    at this boundary as a single notification plus a ``SubmitOutcome``
    carrying the error; store state is written only on the success path and
    only through the form's one declared effect.
    """

    def __init__(
        self,
        *,
        api: ApiClientPort,
        session_store: SessionStore,
        caches: EntityCaches,
        notifier: NotifierPort,
        navigator: NavigatorPort,
        logger: LoggerPort,
        forms: Mapping[str, FormSpec] = FORMS,
    ) -> None:
        self._api = api
        self._session = session_store
        self._caches = caches
        self._notifier = notifier
        self._navigator = navigator
        self._logger = logger
        self._forms = forms

    def create_draft(
        self,
        form_name: str,
        *,
        initial: Mapping[str, Any] | None = None,
        path_params: Mapping[str, str] | None = None,
    ) -> FormDraft:
        try:
            form = self._forms[form_name]
        except KeyError:
            raise KeyError(f"Unknown form: {form_name}") from None
        return FormDraft(
            form,
            initial=initial,
            path_params=path_params,
            origin_path=self._navigator.current_path,
            context_provider=self.validation_context,
        )

    def validation_context(self) -> ValidationContext:
        return ValidationContext(companies=tuple(self._caches.companies))

    async def submit_form(
        self,
        form_name: str,
        values: Mapping[str, Any],
        *,
        path_params: Mapping[str, str] | None = None,
    ) -> SubmitOutcome:
        draft = self.create_draft(form_name, initial=values, path_params=path_params)
        return await self.submit(draft)

    async def submit(self, draft: FormDraft) -> SubmitOutcome:
        form = draft.form
        draft.touched.update(spec.name for spec in form.schema.fields)
        errors = draft.validate()
        if errors:
            self._logger.info("form_validation_failed", form=form.name, fields=sorted(errors))
            failure = ValidationFailed(errors)
            self._notifier.error(failure.message)
            return SubmitOutcome(form_name=form.name, error=failure)

        if draft.submission_in_flight:
            self._logger.warning("duplicate_submission_ignored", form=form.name)
            return SubmitOutcome(form_name=form.name, error=DuplicateSubmission(form.name))

        draft.submission_in_flight = True
        if form.tracks_session_loading:
            self._session.set_loading(True)
        try:
            return await self._send(draft)
        finally:
            draft.submission_in_flight = False
            if form.tracks_session_loading:
                self._session.set_loading(False)

    async def _send(self, draft: FormDraft) -> SubmitOutcome:
        form = draft.form
        values = form.schema.parse(draft.values)
        path = form.resolve_path(draft.path_params)
        self._logger.info(
            "form_submit_started",
            form=form.name,
            method=form.method,
            path=path,
            encoding=form.encoding.value,
        )
        try:
            if form.encoding is BodyEncoding.MULTIPART:
                response = await self._api.send(
                    form.method,
                    path,
                    form_parts=build_form_parts(form, values),
                )
            else:
                response = await self._api.send(
                    form.method,
                    path,
                    json_body=build_json_body(form, values),
                )
            result = self._interpret(form, response)
            self._apply(form.effect, result)
        except SubmitError as exc:
            return self._fail(form, exc)
        except Exception as exc:
            self._logger.error("form_submit_unexpected_error", form=form.name, error=str(exc))
            return self._fail(form, TransportFailure(str(exc)))

        message = response.message or form.success_message
        self._notifier.success(message)
        redirected_to = self._redirect(draft, result)
        self._logger.info(
            "form_submit_succeeded",
            form=form.name,
            status=response.status,
            redirected_to=redirected_to,
        )
        return SubmitOutcome(
            form_name=form.name,
            result=result,
            message=message,
            redirected_to=redirected_to,
        )

    @staticmethod
    def _interpret(form: FormSpec, response: ApiResponse) -> Any:
        success = response.body.get("success")
        if not isinstance(success, bool):
            raise TransportFailure(f"Malformed response from {form.path} (status {response.status})")
        if not success:
            raise ServerRejected(response.message or form.fallback_error, status=response.status)

        raw = response.body.get(form.result_key) if form.result_key else None
        if raw is None:
            if form.result_required:
                raise TransportFailure(f"Response is missing {form.result_key!r}")
            return None
        parser = _RESULT_PARSERS.get(form.effect)
        if parser is None:
            return raw
        try:
            return parser(raw)
        except MalformedPayload as exc:
            raise TransportFailure(str(exc)) from exc

    def _apply(self, effect: SuccessEffect, result: Any) -> None:
        if result is None:
            return
        if effect is SuccessEffect.SET_IDENTITY:
            self._session.set_identity(result)
        elif effect is SuccessEffect.UPSERT_COMPANY:
            self._caches.upsert_company(result)
        elif effect is SuccessEffect.UPSERT_JOB:
            self._caches.upsert_job(result)

    def _redirect(self, draft: FormDraft, result: Any) -> str | None:
        result_id = getattr(result, "id", None)
        target = draft.form.resolve_redirect(draft.path_params, result_id)
        if target is None:
            return None
        if draft.disposed or (
            draft.origin_path is not None and self._navigator.current_path != draft.origin_path
        ):
            self._logger.info("form_redirect_skipped", form=draft.form.name, target=target)
            return None
        return self._navigator.navigate(target)

    def _fail(self, form: FormSpec, error: SubmitError) -> SubmitOutcome:
        if isinstance(error, ServerRejected):
            self._logger.warning(
                "form_submit_rejected",
                form=form.name,
                status=error.status,
                reason=error.message,
            )
            user_message = error.message
        else:
            self._logger.error("form_submit_transport_failure", form=form.name, error=error.message)
            user_message = form.fallback_error
        self._notifier.error(user_message)
        return SubmitOutcome(form_name=form.name, message=user_message, error=error)
