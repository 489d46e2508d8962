"""
Product description enhancer.

Rewrites feed descriptions with Claude. Enhancement is best-effort: a
rate-limiter hiccup is ignored and any API failure falls back to the
description already in the feed.
"""

from typing import Optional
import structlog

import anthropic

from config import settings
from exceptions import ExternalServiceError
from utils.rate_limiter import TokenBucket

logger = structlog.get_logger(__name__)


class DescriptionEnhancerService:
    """
    Rewrite product descriptions through the Anthropic Messages API.

    Calls are throttled by a token bucket shared for the life of the
    service (enhancer_requests_per_minute, refilled continuously).
    """

    MAX_TOKENS = 150
    TEMPERATURE = 0.7

    SYSTEM_PROMPT = (
        "You are an expert in medical sales specializing in medical consumables "
        "used by hospitals daily. Enhance the product description based on the "
        "information provided. Reply with the new description only, as a single "
        "paragraph of plain text."
    )

    def __init__(
        self,
        client: Optional[anthropic.Anthropic] = None,
        limiter: Optional[TokenBucket] = None,
        model: Optional[str] = None,
        enabled: Optional[bool] = None,
    ):
        self.enabled = settings.enhance_descriptions if enabled is None else enabled
        self.model = model or settings.anthropic_model
        self.client = client or anthropic.Anthropic(api_key=settings.anthropic_api_key)
        self.limiter = limiter or TokenBucket(
            tokens_per_interval=settings.enhancer_requests_per_minute,
            interval_seconds=60
        )

    @staticmethod
    def build_prompt(
        name: str,
        category: str,
        description: Optional[str] = None
    ) -> str:
        """
        Build the user prompt for one product.

        The existing description is included only when it is non-blank.
        """
        prompt = f"Product name: {name}\nCategory: {category}\n"
        if description and description.strip():
            prompt += f"Product description: {description}\n\nNew Description:"
        else:
            prompt += "\nNew Description:"
        return prompt

    def _wait_for_token(self, name: str) -> None:
        try:
            waited = self.limiter.acquire()
            if waited:
                logger.debug("enhancer_rate_limited", product_name=name, waited_seconds=round(waited, 2))
        except Exception as e:
            # Fail open: a broken limiter must not stop the import
            logger.error("rate_limiter_error", product_name=name, error=str(e))

    def _complete(self, prompt: str) -> Optional[str]:
        """
        Send one prompt and return the first line of text, or None.

        Raises:
            ExternalServiceError: If the API call fails
        """
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=self.MAX_TOKENS,
                temperature=self.TEMPERATURE,
                system=self.SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt}]
            )
        except Exception as e:
            raise ExternalServiceError(
                "anthropic",
                str(e),
                {"error_type": type(e).__name__}
            ) from e

        texts = [
            block.text for block in (response.content or [])
            if getattr(block, "type", None) == "text" and block.text
        ]
        if not texts:
            return None

        for line in "".join(texts).splitlines():
            if line.strip():
                return line.strip()
        return None

    def enhance(
        self,
        name: str,
        category: str,
        description: Optional[str] = None
    ) -> str:
        """
        Return an enhanced description, or the original on any failure.

        Args:
            name: Product name
            category: Product category
            description: Existing description from the feed (optional)

        Returns:
            Enhanced text, else `description`, else ""
        """
        fallback = description or ""

        if not self.enabled:
            return fallback

        self._wait_for_token(name)

        prompt = self.build_prompt(name, category, description)

        try:
            enhanced = self._complete(prompt)
        except ExternalServiceError as e:
            logger.error(
                "description_enhance_failed",
                product_name=name,
                error=e.message,
                **e.details
            )
            return fallback

        if not enhanced:
            logger.warning("description_enhance_empty", product_name=name)
            return fallback

        logger.debug("description_enhanced", product_name=name)
        return enhanced


# Singleton instance for convenience
_description_enhancer: Optional[DescriptionEnhancerService] = None


def get_description_enhancer() -> DescriptionEnhancerService:
    """Get or create DescriptionEnhancerService instance."""
    global _description_enhancer
    if _description_enhancer is None:
        _description_enhancer = DescriptionEnhancerService()
    return _description_enhancer
