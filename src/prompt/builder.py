"""Prompt composition: fixed persona and knowledge ahead of the user message."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict


class PromptContext(BaseModel):
    """Static persona instructions and domain knowledge."""

    model_config = ConfigDict(frozen=True)

    persona: str
    knowledge: str

    @classmethod
    def from_files(cls, persona_path: str, knowledge_path: str) -> PromptContext:
        persona_file = Path(persona_path)
        knowledge_file = Path(knowledge_path)
        if not persona_file.exists():
            raise FileNotFoundError(f"Persona file not found: {persona_path}")
        if not knowledge_file.exists():
            raise FileNotFoundError(f"Knowledge file not found: {knowledge_path}")
        return cls(
            persona=persona_file.read_text(encoding="utf-8").strip(),
            knowledge=knowledge_file.read_text(encoding="utf-8").strip(),
        )


class PromptBuilder:
    """Builds the single-turn prompt sent to the generation API."""

    def __init__(self, context: PromptContext) -> None:
        self._prefix = f"{context.persona}\n{context.knowledge}\n\n"

    @property
    def prefix(self) -> str:
        return self._prefix

    def build(self, user_message: str) -> str:
        # No truncation or escaping; the message is passed through verbatim.
        return self._prefix + user_message
