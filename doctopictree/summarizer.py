"""
summarizer.py

Document summarization for doctopictree.

Summaries are optional inputs to the clustering pipeline: the lightweight
embedding branch embeds them, and cluster labeling prefers them over raw
content. Summarization is the only asynchronous boundary of the pipeline.

Backends
--------
1. No backend (default)
   - ``lightweight_summarize``: a local extractive summarizer that scores
     sentences by position, distinctive technical keywords, numbers,
     proper nouns and method phrases.

2. A simple LLM callable
   - Pass ``llm=`` as a sync or async callable ``prompt: str -> str``, or an
     object with ``.invoke(prompt)`` / ``.ainvoke(prompt)`` (LangChain).

3. The OpenAI Agents SDK
   - Pass an ``Agent`` via ``agent=``; calls go through ``Runner.run`` under
     a ``trace(...)`` context.

Whatever the backend, a failure for one document never aborts the batch:
that document falls back to ``lightweight_summarize``. Documents are
independent, so they are summarized concurrently with ``asyncio.gather``.
"""

from __future__ import annotations

import asyncio
import inspect
import re
from typing import Any, Callable, List, Optional, Sequence

from agents import Agent, Runner, trace  # OpenAI Agents SDK

from .lexicon import DEFAULT_LEXICON, Lexicon


_SENTENCE_BREAK_RE = re.compile(r"([.!?])\s*(?=[A-Z])")
_NUMBER_RE = re.compile(r"\d+%|\d+\.\d+")
_PROPER_NOUN_RE = re.compile(r"\b[A-Z][a-z]+\b")


def lightweight_summarize(
    text: str,
    max_sentences: int = 10,
    *,
    min_length: int = 500,
    lexicon: Optional[Lexicon] = None,
) -> str:
    """
    Extractive summary made of the ``max_sentences`` best-scoring sentences,
    returned in their original order.

    Texts shorter than ``min_length`` characters are returned unchanged.
    """
    if not text or len(text) < min_length:
        return text

    lex = lexicon or DEFAULT_LEXICON
    sentences = [
        s.strip()
        for s in _SENTENCE_BREAK_RE.sub(r"\1|", text).split("|")
    ]
    sentences = [s for s in sentences if 20 < len(s) < 400]

    if len(sentences) <= max_sentences:
        return " ".join(sentences)

    method_re = re.compile(lex.summary_method_pattern, re.IGNORECASE)
    n = len(sentences)
    scored = []
    for index, sentence in enumerate(sentences):
        lower = sentence.lower()

        if index == 0:
            score = 1.2
        elif index < n * 0.2:
            score = 1.0
        elif index > n * 0.8:
            score = 1.1
        else:
            score = 0.8

        score += 1.5 * sum(1 for kw in lex.summary_keywords if kw in lower)
        score -= 0.5 * sum(1 for kw in lex.summary_generic_terms if kw in lower)
        if _NUMBER_RE.search(sentence):
            score += 0.8
        score += 0.3 * len(_PROPER_NOUN_RE.findall(sentence))
        if method_re.search(sentence):
            score += 0.7

        scored.append((score, index, sentence))

    # stable sort keeps earlier sentences first on equal scores
    top = sorted(scored, key=lambda item: item[0], reverse=True)[:max_sentences]
    top.sort(key=lambda item: item[1])
    return " ".join(sentence for _score, _index, sentence in top)


class DocumentSummarizer:
    """
    Summarize documents with an optional LLM backend and a local fallback.

    At most one of ``agent`` or ``llm`` may be provided; with neither, every
    document goes through :func:`lightweight_summarize`.
    """

    def __init__(
        self,
        agent: Optional[Agent] = None,
        *,
        llm: Optional[Any] = None,
        max_sentences: int = 10,
        min_length: int = 500,
        lexicon: Optional[Lexicon] = None,
        log_fn: Optional[Callable[[str], None]] = print,
    ) -> None:
        """
        Parameters
        ----------
        agent:
            Optional `Agent` instance from the OpenAI Agents SDK.
        llm:
            Optional generic LLM backend: a callable ``str -> str`` (sync or
            async), or an object with ``.invoke`` / ``.ainvoke``.
        max_sentences:
            Target summary length, in sentences.
        min_length:
            Texts shorter than this are returned unchanged and never sent
            to the backend.
        lexicon:
            Word tables used by the local summarizer.
        log_fn:
            Callable used for progress logging (``print`` by default,
            ``st.write`` in Streamlit, ...). ``None`` silences logging.
        """
        if agent is not None and llm is not None:
            raise ValueError(
                "DocumentSummarizer accepts at most one of `agent` or `llm`."
            )
        self.agent: Optional[Agent] = agent
        self.llm: Optional[Any] = llm
        self.max_sentences = max_sentences
        self.min_length = min_length
        self.lexicon = lexicon or DEFAULT_LEXICON
        self._log_fn = log_fn or (lambda _msg: None)

    def _log(self, msg: str) -> None:
        try:
            self._log_fn(msg)
        except Exception:
            # Never let logging break the pipeline
            pass

    @property
    def has_backend(self) -> bool:
        return self.agent is not None or self.llm is not None

    def summarize_local(self, text: str) -> str:
        return lightweight_summarize(
            text,
            self.max_sentences,
            min_length=self.min_length,
            lexicon=self.lexicon,
        )

    # ------------------------------------------------------------------
    # Public sync entrypoint
    # ------------------------------------------------------------------

    def summarize_many(self, texts: Sequence[str]) -> List[str]:
        """
        Synchronous wrapper around :meth:`summarize_many_async`.

        Raises a clear error if called from an already-running event loop
        (common in Jupyter) to avoid silent hangs.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop and loop.is_running():
            raise RuntimeError(
                "DocumentSummarizer.summarize_many() was called from an async "
                "context (e.g. Jupyter). Please use "
                "`await summarize_many_async(...)` instead."
            )
        return asyncio.run(self.summarize_many_async(texts))

    # ------------------------------------------------------------------
    # Public async API
    # ------------------------------------------------------------------

    async def summarize_many_async(self, texts: Sequence[str]) -> List[str]:
        """Summarize ``texts`` concurrently; output order matches input order."""
        if not texts:
            return []
        if not self.has_backend:
            return [self.summarize_local(t) for t in texts]

        self._log(f"[DocumentSummarizer] Summarizing {len(texts)} document(s) with LLM backend...")
        tasks = [self.summarize_async(t, index=i) for i, t in enumerate(texts)]
        if self.agent is not None:
            with trace(f"doctopictree DocumentSummarizer (documents={len(texts)})"):
                return list(await asyncio.gather(*tasks))
        return list(await asyncio.gather(*tasks))

    async def summarize_async(self, text: str, index: int = 0) -> str:
        """Summarize one text, falling back to the local summarizer on failure."""
        if not text or len(text) < self.min_length or not self.has_backend:
            return self.summarize_local(text)

        try:
            summary = await self._call_llm(self._build_prompt(text))
        except Exception as exc:
            self._log(
                f"[DocumentSummarizer] Backend failed for document {index} "
                f"({type(exc).__name__}: {exc}); using lightweight summary."
            )
            return self.summarize_local(text)

        if not summary:
            self._log(
                f"[DocumentSummarizer] Empty backend output for document {index}; "
                "using lightweight summary."
            )
            return self.summarize_local(text)
        return summary

    # ------------------------------------------------------------------
    # Internal helpers – LLM call & prompt
    # ------------------------------------------------------------------

    async def _call_llm(self, prompt: str) -> str:
        if self.agent is not None:
            result = await Runner.run(self.agent, prompt)
            raw = getattr(result, "final_output", "") or ""
            return str(raw).strip()

        backend = self.llm

        if callable(backend) and not hasattr(backend, "invoke") and not hasattr(backend, "ainvoke"):
            out = backend(prompt)
            if inspect.isawaitable(out):
                out = await out
        elif hasattr(backend, "ainvoke"):
            out = await backend.ainvoke(prompt)
        elif hasattr(backend, "invoke"):
            out = backend.invoke(prompt)
        else:
            raise TypeError(
                "llm= must be either a callable, or an object with "
                "an `.invoke(prompt)` or `.ainvoke(prompt)` method."
            )

        if isinstance(out, str):
            return out.strip()

        # LangChain messages
        content = getattr(out, "content", None)
        if content is not None:
            return str(content).strip()

        if isinstance(out, dict):
            for key in ("text", "content", "output", "summary"):
                if key in out:
                    return str(out[key]).strip()

        return str(out).strip()

    def _build_prompt(self, text: str) -> str:
        return f"""
                Summarize the following document as a short abstract of at most
                {self.max_sentences} sentences.

                Guidelines:
                - Keep the specific methods, systems and domain terms the document uses.
                - Do not add information that is not in the document.
                - Return plain text only: no headings, lists, markdown or commentary.

                Document:
                {text}
                """.strip()
