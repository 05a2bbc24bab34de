"""
AI responder wrapping the chat model behind a degrade-on-failure contract.

Every public call except ``summarize`` is total: remote failures and a
missing credential turn into fixed placeholder content instead of exceptions.
``summarize`` raises ``AIUnavailableError`` on remote failure so the caller
can pick its own placeholder.
"""
import json
import logging
import re
from typing import Any, Dict, List, Optional, Sequence

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from pydantic import BaseModel, Field

from knowledge_scout.core.agents.prompts import (
    ANSWER_HISTORY_TEMPLATE,
    ANSWER_USER_PROMPT_TEMPLATE,
    ASSISTANT_SYSTEM_PROMPT,
    KEY_POINTS_USER_PROMPT_TEMPLATE,
    QUESTIONS_USER_PROMPT_TEMPLATE,
    SUMMARY_USER_PROMPT_TEMPLATE,
)
from knowledge_scout.core.config import settings
from knowledge_scout.core.exceptions import AIUnavailableError
from knowledge_scout.core.llm_config import LLMFactory

logger = logging.getLogger(__name__)

SUMMARY_DISABLED = "AI summary generation is not available. Please check your API configuration."
ANSWER_DISABLED = "AI Q&A is not available. Please check your API configuration."
ANSWER_FAILED = "I apologize, but I encountered an error while processing your question. Please try again."
QUESTIONS_DISABLED = "AI question generation is not available. Please check your API configuration."
QUESTIONS_FALLBACK = "What is the main topic of this document?"
KEY_POINTS_DISABLED = "AI key point extraction is not available. Please check your API configuration."
KEY_POINTS_FAILED = "Failed to extract key points"

DEFAULT_CONFIDENCE = 0.8
SUGGESTED_QUESTION_COUNT = 5

_CODE_FENCE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")


class AnswerResult(BaseModel):
    """Answer to a question about a document."""
    answer: str
    sources: List[str] = Field(default_factory=list)
    confidence: float = Field(DEFAULT_CONFIDENCE, ge=0.0, le=1.0)


class AIResponder:
    """Summaries, answers and suggested questions for a document's text."""

    def __init__(self, llm: Optional[BaseChatModel] = None):
        self.llm = llm

    @classmethod
    def from_settings(cls) -> "AIResponder":
        """Build the responder for the configured provider, disabled without a key."""
        if not LLMFactory.api_key_for(settings.LLM_PROVIDER):
            logger.warning(
                f"No API key configured for LLM provider '{settings.LLM_PROVIDER}'. AI features will be disabled."
            )
            return cls(None)

        llm = LLMFactory.create_llm(temperature=0.3)
        logger.info(f"AI responder initialized with provider '{settings.LLM_PROVIDER}'")
        return cls(llm)

    @property
    def enabled(self) -> bool:
        return self.llm is not None

    def summarize(self, text: str) -> str:
        """
        Summarize a document.

        Raises:
            AIUnavailableError: If the model call fails
        """
        if not self.enabled:
            return SUMMARY_DISABLED

        try:
            return self._generate(SUMMARY_USER_PROMPT_TEMPLATE.format(document=text))
        except Exception as e:
            logger.error(f"Error generating document summary: {e}")
            raise AIUnavailableError("Failed to generate document summary") from e

    def answer(self, question: str, document_text: str, history: Sequence[Dict[str, Any]] = ()) -> AnswerResult:
        """
        Answer a question using the full document text and recent chat history.

        Args:
            question: The user's question
            document_text: Extracted text of the document
            history: Prior messages as ``{"role", "content"}`` mappings, oldest first

        Returns:
            AnswerResult; never raises
        """
        if not self.enabled:
            return AnswerResult(answer=ANSWER_DISABLED, confidence=0.0)

        history_block = ""
        if history:
            transcript = "\n".join(f"{msg['role']}: {msg['content']}" for msg in history)
            history_block = ANSWER_HISTORY_TEMPLATE.format(transcript=transcript)

        prompt = ANSWER_USER_PROMPT_TEMPLATE.format(
            document=document_text,
            history=history_block,
            question=question,
        )

        try:
            reply = self._generate(prompt)
        except Exception as e:
            logger.error(f"Error answering question: {e}")
            return AnswerResult(answer=ANSWER_FAILED, confidence=0.0)

        return AnswerResult(answer=reply)

    def generate_questions(self, text: str) -> List[str]:
        """Suggest questions a reader might ask about the document."""
        if not self.enabled:
            return [QUESTIONS_DISABLED]

        prompt = QUESTIONS_USER_PROMPT_TEMPLATE.format(count=SUGGESTED_QUESTION_COUNT, document=text)
        try:
            reply = self._generate(prompt)
        except Exception as e:
            logger.error(f"Error generating questions: {e}")
            return [QUESTIONS_FALLBACK]

        return self._parse_string_list(reply)

    def extract_key_points(self, text: str) -> List[str]:
        """List the key points and main topics of the document."""
        if not self.enabled:
            return [KEY_POINTS_DISABLED]

        try:
            reply = self._generate(KEY_POINTS_USER_PROMPT_TEMPLATE.format(document=text))
        except Exception as e:
            logger.error(f"Error extracting key points: {e}")
            return [KEY_POINTS_FAILED]

        return self._parse_string_list(reply)

    def _generate(self, prompt: str) -> str:
        messages = [
            SystemMessage(content=ASSISTANT_SYSTEM_PROMPT),
            HumanMessage(content=prompt),
        ]
        response = self.llm.invoke(messages)  # type: ignore[union-attr]
        return self._content_text(response.content)

    @staticmethod
    def _content_text(content: Any) -> str:
        # Some providers return a list of content parts instead of a string
        if isinstance(content, str):
            return content
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)

    @staticmethod
    def _parse_string_list(reply: str) -> List[str]:
        """Parse a JSON array of strings, falling back to the raw reply."""
        cleaned = _CODE_FENCE.sub("", reply.strip())
        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError:
            return [reply]

        if not isinstance(parsed, list):
            return [reply]
        return [str(item) for item in parsed]
