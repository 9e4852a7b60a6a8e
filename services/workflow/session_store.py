"""Simple in-memory store for analysis sessions.

Sessions that go untouched for `idle_ttl_seconds` are evicted, and the store
never holds more than `max_sessions`; the least recently used session is
dropped first. Evicted workflows are reset so their in-flight analysis is
cancelled.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from typing import Callable, Tuple
from uuid import uuid4

from services.workflow.analysis_workflow import AnalysisWorkflow

LOGGER = logging.getLogger(__name__)


class SessionStore:
	"""Keep one analysis workflow per active user interaction.

	Args:
		workflow_factory: Builds a fresh idle workflow.
		max_sessions: Upper bound on live sessions. `0` disables the cap.
		idle_ttl_seconds: Evict sessions untouched for this long. `0` disables expiry.
		clock: Monotonic time source.
	"""

	def __init__(
		self,
		workflow_factory: Callable[[], AnalysisWorkflow],
		*,
		max_sessions: int = 0,
		idle_ttl_seconds: float = 0,
		clock: Callable[[], float] = time.monotonic,
	) -> None:
		if workflow_factory is None:
			raise ValueError("A workflow factory is required.")
		if max_sessions < 0 or idle_ttl_seconds < 0:
			raise ValueError("Session limits must be non-negative.")
		self._factory = workflow_factory
		self._max_sessions = max_sessions
		self._idle_ttl = idle_ttl_seconds
		self._clock = clock
		# session id -> (workflow, last touched), least recently used first
		self._sessions: "OrderedDict[str, Tuple[AnalysisWorkflow, float]]" = OrderedDict()

	def create(self) -> Tuple[str, AnalysisWorkflow]:
		"""Create a new idle session and return its id and workflow."""
		self.evict_expired()
		if self._max_sessions:
			while len(self._sessions) >= self._max_sessions:
				oldest_id = next(iter(self._sessions))
				LOGGER.info("Session limit reached; evicting least recently used session %s", oldest_id)
				self._evict(oldest_id)
		session_id = uuid4().hex
		workflow = self._factory()
		self._sessions[session_id] = (workflow, self._clock())
		return session_id, workflow

	def get(self, session_id: str) -> AnalysisWorkflow:
		"""Return a session's workflow or raise KeyError if missing or expired."""
		entry = self._sessions.get(session_id)
		if entry is not None and self._expired(entry[1]):
			LOGGER.info("Session %s expired", session_id)
			self._evict(session_id)
			entry = None
		if entry is None:
			raise KeyError(f"Session {session_id} not found")
		workflow = entry[0]
		self._sessions[session_id] = (workflow, self._clock())
		self._sessions.move_to_end(session_id)
		return workflow

	def discard(self, session_id: str) -> None:
		"""Reset and forget a session, cancelling any in-flight analysis."""
		if session_id not in self._sessions:
			raise KeyError(f"Session {session_id} not found")
		self._evict(session_id)

	def discard_all(self) -> int:
		"""Discard every session and return how many were removed."""
		count = len(self._sessions)
		for workflow, _ in self._sessions.values():
			workflow.reset()
		self._sessions.clear()
		return count

	def evict_expired(self) -> int:
		"""Drop every session idle for longer than the TTL; return how many."""
		if not self._idle_ttl:
			return 0
		expired = [sid for sid, (_, touched) in self._sessions.items() if self._expired(touched)]
		for session_id in expired:
			self._evict(session_id)
		if expired:
			LOGGER.info("Evicted %d idle session(s)", len(expired))
		return len(expired)

	def _expired(self, touched: float) -> bool:
		return bool(self._idle_ttl) and self._clock() - touched > self._idle_ttl

	def _evict(self, session_id: str) -> None:
		workflow, _ = self._sessions.pop(session_id)
		workflow.reset()

	def __len__(self) -> int:
		return len(self._sessions)

	def __contains__(self, session_id: object) -> bool:
		return session_id in self._sessions
