"""
llm_service.py

Generation client over LiteLLM:
- one call to the preferred model
- on failure: list available models, pick a fallback, retry once
- if the fallback path fails too, the primary error is raised

Dependencies:
    pip install litellm
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

import litellm
from litellm import completion

from loanchat.config import Config, GenerationConfig
from loanchat.errors import NoSuitableModelError

logger = logging.getLogger(__name__)

NO_RESPONSE_TEXT = "I'm sorry, I couldn't generate a response."


def init_litellm(config: Optional[GenerationConfig] = None) -> None:
    config = config or Config.generation
    if config.api_key:
        litellm.api_key = config.api_key
    if config.api_base:
        litellm.api_base = config.api_base


# =========================================================
# 🔹 Fallback model selection
# =========================================================

def normalize_model_id(name: str, provider: Optional[str] = None) -> str:
    """'models/gemini-pro' or 'gemini/gemini-pro' -> 'gemini-pro'"""
    if name.startswith("models/"):
        name = name[len("models/"):]
    if provider and name.startswith(f"{provider}/"):
        name = name[len(provider) + 1:]
    return name


def select_fallback_model(models: List[str], family_prefix: str = "gemini") -> Optional[str]:
    """
    Pick a fallback model, in strict priority order:
    1. first id containing both "flash" and "1.5"
    2. first id containing "flash"
    3. first id containing "pro"
    4. first id starting with the model-family prefix
    """
    rules = [
        lambda m: "flash" in m and "1.5" in m,
        lambda m: "flash" in m,
        lambda m: "pro" in m,
        lambda m: m.startswith(family_prefix),
    ]
    for rule in rules:
        for model_id in models:
            if rule(model_id):
                return model_id
    return None


def _extract_text(resp) -> str:
    choices = getattr(resp, "choices", None)
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    return (getattr(message, "content", None) or "").strip()


# =========================================================
# 🔹 Client
# =========================================================

class GenerationClient:
    """Remote text generation with one-shot model fallback."""

    def __init__(self, config: Optional[GenerationConfig] = None):
        self.config = config or Config.generation

    def generate(self, message: str, context: str = "") -> str:
        """
        Generate a reply for a single turn.

        Args:
            message: the user's message
            context: product context, sent as the first message part when not empty

        Returns:
            The reply text, or a placeholder if the model returned nothing

        Raises:
            The primary attempt's exception, if the primary call and the
            fallback path both fail
        """
        model_id = self.config.model
        try:
            resp = self._complete(model_id, message, context)
        except Exception as primary_error:
            logger.error(f"❌ Error with model {model_id}: {primary_error}")
            try:
                logger.info("🔎 Attempting to find an available model...")
                fallback = self._find_fallback_model()
                logger.info(f"🔁 Retrying with fallback model: {fallback}")
                resp = self._complete(fallback, message, context)
            except Exception as fallback_error:
                logger.error(f"❌ Fallback failed: {fallback_error}")
                raise primary_error

        return _extract_text(resp) or NO_RESPONSE_TEXT

    def list_models(self) -> List[str]:
        """Model ids currently offered by the provider, without prefixes."""
        names = litellm.get_valid_models(
            check_provider_endpoint=True,
            custom_llm_provider=self.config.provider,
            api_key=self.config.api_key,
            api_base=self.config.api_base,
        )
        return [normalize_model_id(n, self.config.provider) for n in names or []]

    def _find_fallback_model(self) -> str:
        models = self.list_models()
        logger.info(f"📚 Found models: {models}")
        fallback = select_fallback_model(models, self.config.family_prefix)
        if not fallback:
            raise NoSuitableModelError("No suitable model found.", details=models)
        return fallback

    def _build_messages(self, message: str, context: str) -> List[Dict]:
        parts = []
        if context:
            parts.append({"type": "text", "text": context})
        parts.append({"type": "text", "text": message})
        return [{"role": "user", "content": parts}]

    def _complete(self, model_id: str, message: str, context: str):
        params = {
            "model": self.config.qualify(model_id),
            "messages": self._build_messages(message, context),
        }
        if self.config.api_key:
            params["api_key"] = self.config.api_key
        if self.config.api_base:
            params["api_base"] = self.config.api_base
        return completion(**params)
