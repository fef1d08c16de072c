import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple

import requests

from quiz.services.game import events

logger = logging.getLogger(__name__)


class ChatStatus(str, Enum):
    PENDING = 'PENDING'
    COMPLETED = 'COMPLETED'
    FAILED = 'FAILED'
    CANCELLED = 'CANCELLED'

    @classmethod
    def parse(cls, raw: Optional[str]) -> 'ChatStatus':
        try:
            return cls(raw)
        except ValueError:
            # SUBMITTED, EXECUTING_QUERY, FETCHING_METADATA... all still running
            return cls.PENDING

    @property
    def terminal(self) -> bool:
        return self is not ChatStatus.PENDING


@dataclass
class ChatReply:
    status: ChatStatus
    text: Optional[str] = None


class ChatError(Exception):
    pass


def _rows_to_text(statement: dict) -> str:
    manifest = statement.get('manifest') or {}
    columns = [c.get('name', '') for c in (manifest.get('schema') or {}).get('columns', [])]
    rows = (statement.get('result') or {}).get('data_array') or []
    lines = []
    if columns:
        lines.append(' | '.join(columns))
    lines.extend(' | '.join('' if v is None else str(v) for v in row) for row in rows)
    return '\n'.join(lines) if lines else 'No rows returned.'


class ChatProxy:
    """Stateless client for the Genie conversation API.

    ``ask`` posts a question and polls until Genie reports a terminal status
    or the attempt budget runs out.
    """

    def __init__(self, host: str, token: str, space_id: str, attempts: int = 30,
                 delay: float = 2.0, timeout: float = 10.0,
                 sleep: Callable[[float], None] = time.sleep, session: Optional[requests.Session] = None):
        self.base_url = f"https://{host}/api/2.0/genie/spaces/{space_id}" if host else ''
        self.token = token
        self.attempts = attempts
        self.delay = delay
        self.timeout = timeout
        self.sleep = sleep
        self.http = session or requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self.base_url and self.token)

    def _request(self, method: str, path: str, **kwargs) -> dict:
        try:
            res = self.http.request(
                method,
                f"{self.base_url}{path}",
                headers={'Authorization': f"Bearer {self.token}"},
                timeout=self.timeout,
                **kwargs,
            )
            res.raise_for_status()
            return res.json()
        except (requests.RequestException, ValueError) as exc:
            raise ChatError(f"Genie request failed: {exc}") from exc

    def post(self, question: str) -> Tuple[str, str]:
        data = self._request('POST', '/start-conversation', json={'content': question})
        conversation_id = data.get('conversation_id') or (data.get('conversation') or {}).get('id')
        message_id = data.get('message_id') or (data.get('message') or {}).get('id')
        if not conversation_id or not message_id:
            raise ChatError('Genie did not return a conversation')
        return conversation_id, message_id

    def poll(self, conversation_id: str, message_id: str) -> ChatReply:
        path = f"/conversations/{conversation_id}/messages/{message_id}"
        message = self._request('GET', path)
        status = ChatStatus.parse(message.get('status'))
        if status is not ChatStatus.COMPLETED:
            return ChatReply(status)
        for attachment in message.get('attachments') or []:
            text = (attachment.get('text') or {}).get('content')
            if text:
                return ChatReply(status, text)
            if attachment.get('query') and attachment.get('attachment_id'):
                result = self._request('GET', f"{path}/attachments/{attachment['attachment_id']}/query-result")
                return ChatReply(status, _rows_to_text(result.get('statement_response') or {}))
        return ChatReply(status, message.get('content') or '')

    def ask(self, question: str) -> ChatReply:
        conversation_id, message_id = self.post(question)
        logger.info(f"[chat] posted conversation={conversation_id} message={message_id}")
        for attempt in range(1, self.attempts + 1):
            reply = self.poll(conversation_id, message_id)
            if reply.status.terminal:
                logger.info(f"[chat] {reply.status.value} after {attempt} polls")
                return reply
            if attempt < self.attempts:
                self.sleep(self.delay)
        logger.warning(f"[chat] no answer after {self.attempts} polls")
        return ChatReply(ChatStatus.PENDING)


def relay_question(router, proxy: ChatProxy, sid: str, question: str) -> None:
    """Forward an admin's question and send the outcome back to that admin only."""
    if not router.to_admin_connection(sid, events.ChatbotStarted(question)):
        return
    if not proxy.configured:
        router.to_admin_connection(sid, events.ChatbotError('Data chat is not configured'))
        return
    try:
        reply = proxy.ask(question)
    except ChatError as exc:
        logger.warning(f"[chat] {exc}")
        router.to_admin_connection(sid, events.ChatbotError(str(exc)))
        return
    if reply.status is ChatStatus.COMPLETED:
        router.to_admin_connection(sid, events.ChatbotResponse(question, reply.text or ''))
    elif reply.status is ChatStatus.PENDING:
        router.to_admin_connection(sid, events.ChatbotError('The data chat did not answer in time'))
    else:
        router.to_admin_connection(sid, events.ChatbotError(f"The data chat request was {reply.status.value.lower()}"))
