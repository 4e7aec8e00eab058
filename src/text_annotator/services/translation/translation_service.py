"""Translation Service - interface for the external translate(text, context) collaborator."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class TranslationResult:
    """Result of a translation request."""

    translation: str
    model: str
    examples: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def is_error(self) -> bool:
        """True if translation failed."""
        return self.error is not None


class TranslationService(ABC):
    """
    Abstract service translating an annotated span using its surrounding context.

    Implementations (e.g., GeminiTranslationService) handle API calls and report
    failures through TranslationResult.error instead of raising.
    """

    @abstractmethod
    def translate(self, text: str, context: str) -> TranslationResult:
        """
        Translate ``text`` as it is used in ``context``.

        Args:
            text: The annotated span.
            context: Surrounding text captured when the annotation was created.

        Returns:
            TranslationResult with translation and examples, or error message.
        """
        pass
