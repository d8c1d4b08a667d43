"""Narrative summarizer.

Turns a deterministic analysis (already computed, never recomputed here) into
a short markdown narrative via an LLM. The scores are facts; the LLM only
explains them.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from llama_index.core.llms import LLM

logger = logging.getLogger(__name__)

_PROMPTS: dict[str, str] = {
    "capability_heatmap": """\
You are an AI analyst providing insights on organizational capabilities.
The data below shows how capabilities are distributed across {group_by} groups.
Each matrix cell is the number of roles in that group requiring the capability.

Focus on:
1. Key patterns and trends
2. Notable strengths and potential gaps
3. Actionable recommendations
4. Areas that may need attention

Respond in markdown. Be concise and do not invent data that is not shown.

Request: {message}

{analysis}
""",
}

_DEFAULT_MESSAGES = {
    "capability_heatmap": "provide insights on the capability distribution",
}


class AnalysisSummarizer:
    def __init__(self, llm: LLM, timeout: float = 120.0) -> None:
        self._llm = llm
        self._timeout = timeout

    async def narrate(
        self,
        kind: str,
        analysis: str,
        message: Optional[str] = None,
        **fields: str,
    ) -> str:
        """Return the LLM narrative for *analysis* using the *kind* template."""
        template = _PROMPTS[kind]
        prompt = template.format(
            analysis=analysis,
            message=message or _DEFAULT_MESSAGES[kind],
            **fields,
        )
        response = await asyncio.wait_for(self._llm.acomplete(prompt), timeout=self._timeout)
        text = response.text.strip()
        logger.info("Narrative generated for %s (%d chars)", kind, len(text))
        return text


def build_summarizer(base_url: str, model: str, timeout: float) -> AnalysisSummarizer:
    """Build the Ollama-backed summarizer. Heavy import happens here, not at module load."""
    from llama_index.llms.ollama import Ollama

    logger.info("Loading LLM: %s via %s", model, base_url)
    llm = Ollama(
        model=model,
        base_url=base_url,
        request_timeout=timeout,
        context_window=4096,
        additional_kwargs={"options": {"num_ctx": 4096}},
    )
    return AnalysisSummarizer(llm, timeout=timeout)
