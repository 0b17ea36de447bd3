"""Reply stream processing for ``call``.

One ``ReplyStreamProcessor`` owns the replies of a single outstanding call.
It starts in ``AWAITING_REPLY``, renders every reply in arrival order and
moves to ``DONE`` (closing the connection) on an error, a render failure, a
reply without the continuation flag, or any reply when ``--more`` was not
requested.
"""

from __future__ import annotations

import logging
import sys
from enum import Enum
from typing import Optional, Protocol

from varlinkkit.events import ReplyEvent

from .context import CliContext
from .errors import CliError
from .output import RenderError, emit, format_parameters

LOGGER = logging.getLogger("varlink_cli.replies")


class ReplyState(Enum):
    AWAITING_REPLY = "awaiting-reply"
    DONE = "done"


class CallOutcome(Enum):
    SUCCESS = "success"
    REMOTE_ERROR = "remote-error"
    LOCAL_FAILURE = "local-failure"
    CANCELED = "canceled"


class Closable(Protocol):
    def close(self) -> None: ...


class ReplyStreamProcessor:
    """Reply handler registered for one call."""

    def __init__(self, ctx: CliContext, connection: Closable, *, more: bool = False) -> None:
        self.ctx = ctx
        self.connection = connection
        self.more = more
        self.state = ReplyState.AWAITING_REPLY
        self.outcome: Optional[CallOutcome] = None
        self.failure: Optional[CliError] = None
        self.replies = 0

    def __call__(self, reply: ReplyEvent) -> None:
        if self.state is ReplyState.DONE:
            raise RuntimeError("reply delivered after the call completed")
        self.replies += 1
        if reply.is_error:
            print(f"Call failed with error: {reply.error}", file=sys.stderr)
            try:
                if reply.parameters:
                    emit(self.ctx, format_parameters(reply.parameters))
            except RenderError as exc:
                print(f"Unable to read message: {exc}", file=sys.stderr)
            self._finish(CallOutcome.REMOTE_ERROR, CliError.REMOTE_ERROR)
            return
        try:
            fragments = format_parameters(reply.parameters)
        except RenderError as exc:
            print(f"Unable to read message: {exc}", file=sys.stderr)
            self._finish(CallOutcome.LOCAL_FAILURE, CliError.INVALID_JSON)
            return
        emit(self.ctx, fragments)
        if reply.continues and self.more:
            return
        self._finish(CallOutcome.SUCCESS)

    def cancel(self) -> None:
        """Record a user interrupt; a finished stream keeps its outcome."""
        if self.state is ReplyState.DONE:
            return
        self._finish(CallOutcome.CANCELED, CliError.CANCELED)

    def _finish(self, outcome: CallOutcome, failure: Optional[CliError] = None) -> None:
        self.state = ReplyState.DONE
        self.outcome = outcome
        self.failure = failure
        LOGGER.debug("call finished after %d replies: %s", self.replies, outcome.value)
        self.connection.close()

    @property
    def exit_code(self) -> int:
        if self.outcome in (None, CallOutcome.SUCCESS, CallOutcome.CANCELED):
            return 0
        return int(self.failure or CliError.PANIC)


__all__ = ["CallOutcome", "ReplyState", "ReplyStreamProcessor"]
