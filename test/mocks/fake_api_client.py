from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Mapping, Sequence, Union

from domain.models import ApiResponse
from domain.ports import ApiClientPort, FormPart

ScriptedReply = Union[ApiResponse, Exception]


@dataclass(frozen=True)
class RecordedCall:
    method: str
    path: str
    json_body: Mapping[str, Any] | None = None
    form_parts: Sequence[FormPart] | None = None
    query: Mapping[str, str] | None = None

    def part(self, name: str) -> Any:
        for part_name, value in self.form_parts or ():
            if part_name == name:
                return value
        raise KeyError(name)


class FakeApiClient:
    """
    Scripted test double for ApiClientPort.

    Replies are queued per ``"METHOD /path"`` key and consumed in order; the
    last reply for a key is reused once the queue runs dry. An ``Exception``
    reply is raised instead of returned. ``gate`` lets a test hold a request
    open to observe in-flight state.
    """

    def __init__(self) -> None:
        self.calls: list[RecordedCall] = []
        self._replies: dict[str, list[ScriptedReply]] = {}
        self.gate: asyncio.Event | None = None

    def reply(self, method: str, path: str, *replies: ScriptedReply) -> "FakeApiClient":
        self._replies.setdefault(f"{method.upper()} {path}", []).extend(replies)
        return self

    def reply_json(
        self,
        method: str,
        path: str,
        body: Mapping[str, Any],
        status: int = 200,
    ) -> "FakeApiClient":
        return self.reply(method, path, ApiResponse(status=status, body=body))

    def calls_to(self, path: str) -> list[RecordedCall]:
        return [call for call in self.calls if call.path == path]

    async def send(
        self,
        method: str,
        path: str,
        *,
        json_body: Mapping[str, Any] | None = None,
        form_parts: Sequence[FormPart] | None = None,
        query: Mapping[str, str] | None = None,
    ) -> ApiResponse:
        self.calls.append(
            RecordedCall(
                method=method,
                path=path,
                json_body=dict(json_body) if json_body is not None else None,
                form_parts=list(form_parts) if form_parts is not None else None,
                query=dict(query) if query is not None else None,
            )
        )
        if self.gate is not None:
            await self.gate.wait()

        key = f"{method.upper()} {path}"
        queue = self._replies.get(key)
        if not queue:
            raise AssertionError(f"No scripted reply for {key}")
        reply = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(reply, Exception):
            raise reply
        return reply


_api_check: ApiClientPort = FakeApiClient()
