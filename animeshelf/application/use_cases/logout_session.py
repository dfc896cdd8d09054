from __future__ import annotations

from animeshelf.application.ports.session_port import SessionPort


class LogoutSessionUseCase:
    def __init__(self, *, session_port: SessionPort):
        self._session_port = session_port

    def execute(self, *, session_token: str | None) -> None:
        if session_token:
            self._session_port.revoke_session(session_token)
