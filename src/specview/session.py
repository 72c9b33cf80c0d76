"""The viewer's single piece of mutable state: the currently loaded document.

:class:`ViewerSession` holds one :class:`SessionState` reference and
replaces it wholesale on every parse attempt, so readers always see a
consistent ``(document, error, text)`` triple. Parsing is the only way to
change it:

* valid text -> new document, no error;
* invalid text -> no document, error message (the last good document is
  discarded);
* blank text -> no document, no error.

The tag index and per-operation examples are derived from the document and
cached by its identity, so they are computed once per successful parse.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from specview.debounce import Debouncer
from specview.examples.extractor import extract_examples
from specview.exceptions import DocumentError
from specview.index import build_tag_index
from specview.models import (
    Document,
    IndexEntry,
    OperationExamples,
    SynthesisConfig,
    TagIndex,
    ViewerConfig,
)
from specview.parser.validator import parse_document

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")


@dataclass(frozen=True)
class SessionState:
    """One parse attempt's outcome. ``document`` and ``error`` are never both set."""

    document: Optional[Document] = None
    error: Optional[str] = None
    text: str = ""


class IdentityCache(Generic[K, V]):
    """Single-slot cache keyed by object identity.

    A new key (compared with ``is``) replaces the cached value.
    """

    def __init__(self, compute: Callable[[K], V]) -> None:
        self._compute = compute
        self._key: Optional[K] = None
        self._value: Optional[V] = None

    def get(self, key: K) -> V:
        if self._key is not key or self._value is None:
            self._value = self._compute(key)
            self._key = key
        return self._value

    def clear(self) -> None:
        self._key = None
        self._value = None


class ViewerSession:
    """Parses document text and serves the derived views of the result.

    Args:
        viewer: Debounce settings for :meth:`submit`.
        synthesis: Synthesizer settings for :meth:`examples_for`.
        on_change: Called with the new :class:`SessionState` after every
            parse attempt, including debounced ones.

    Example::

        session = ViewerSession()
        session.load(text)
        if session.error is None:
            for tag in session.index.tags:
                ...
    """

    def __init__(
        self,
        viewer: Optional[ViewerConfig] = None,
        synthesis: Optional[SynthesisConfig] = None,
        on_change: Optional[Callable[[SessionState], Any]] = None,
    ) -> None:
        self.viewer = viewer or ViewerConfig()
        self.synthesis = synthesis or SynthesisConfig()
        self.on_change = on_change
        self._state = SessionState()
        self._lock = threading.Lock()
        self._index: IdentityCache[Document, TagIndex] = IdentityCache(build_tag_index)
        self._examples: dict[str, OperationExamples] = {}
        self._examples_owner: Optional[Document] = None
        self._generation = 0
        self._debouncer = Debouncer(self.viewer.debounce_seconds, self._load)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def document(self) -> Optional[Document]:
        return self._state.document

    @property
    def error(self) -> Optional[str]:
        return self._state.error

    @property
    def index(self) -> Optional[TagIndex]:
        """Tag index of the current document, or ``None`` without one."""
        document = self._state.document
        if document is None:
            return None
        return self._index.get(document)

    @property
    def pending(self) -> bool:
        """True while a submitted text is waiting for the debounce window."""
        return self._debouncer.pending

    def load(self, text: str) -> SessionState:
        """Parse *text* now and replace the session state.

        A parse that finishes after a newer :meth:`load` or :meth:`submit`
        was started is discarded.

        Returns:
            The new state, or the current one if this parse was superseded.
            Parse failures are reported through :attr:`SessionState.error`,
            never raised.
        """
        return self._load(text, self._next_generation())

    def _next_generation(self) -> int:
        with self._lock:
            self._generation += 1
            return self._generation

    def _load(self, text: str, generation: int) -> SessionState:
        if not text.strip():
            state = SessionState(text=text)
        else:
            try:
                document = parse_document(text)
            except DocumentError as exc:
                logger.debug("Parse failed, discarding current document: %s", exc)
                state = SessionState(error=str(exc), text=text)
            else:
                state = SessionState(document=document, text=text)

        with self._lock:
            if generation != self._generation:
                logger.debug(
                    "Discarding parse %d, superseded by %d", generation, self._generation
                )
                return self._state
            previous = self._state.document
            self._state = state

        if state.document is not None:
            logger.info(
                "Loaded '%s' %s (%d operation(s))",
                state.document.info.title,
                state.document.info.version,
                state.document.operation_count(),
            )
        elif previous is not None:
            logger.info("Document cleared")

        if self.on_change is not None:
            self.on_change(state)
        return state

    def submit(self, text: str) -> None:
        """Schedule :meth:`load` after the debounce window; later submits win."""
        self._debouncer.call(text, self._next_generation())

    def flush(self) -> bool:
        """Run a pending :meth:`submit` immediately."""
        return self._debouncer.flush()

    def close(self) -> None:
        """Drop any pending :meth:`submit`."""
        self._debouncer.cancel()

    def examples_for(self, entry: IndexEntry) -> Optional[OperationExamples]:
        """Examples of *entry*'s operation in the current document, cached per document."""
        document = self._state.document
        if document is None:
            return None
        if self._examples_owner is not document:
            self._examples = {}
            self._examples_owner = document
        examples = self._examples.get(entry.key)
        if examples is None:
            examples = extract_examples(entry.operation, document, self.synthesis)
            self._examples[entry.key] = examples
        return examples
