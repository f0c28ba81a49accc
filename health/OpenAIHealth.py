# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-06
# Updated: 2026-01-28
# Description: OpenAIHealth
# -----------------------------------------------------------------------------

import time
import logging
from typing import Optional

from openai import OpenAIError

from chat.OpenAIChat import OpenAIChat
from utility.logging_utils import get_logger


class OpenAIHealth:
    """
    Smoke tests for OpenAI chat connectivity, run through the app's OpenAIChat.
    """

    def __init__(self, chat: OpenAIChat, logger: Optional[logging.Logger] = None):
        self.chat = chat
        self.logger = logger or get_logger(__name__)
        self.logger.info("Configured model: %s", self.chat.model)

    def get_service_info(self) -> dict:
        """
        Returns metadata about the OpenAI chat configuration.
        """
        cfg = self.chat.cfg
        key = getattr(cfg, "openai_api_key", "") or ""
        info = {
            "provider": "OpenAI",
            "endpoint": getattr(cfg, "openai_base_url", "") or "https://api.openai.com/v1",
            "model": self.chat.model,
            "api_key_prefix": f"{key[:4]}..." if key else None,
        }
        self.logger.info("Service info: %s", info)
        return info

    def _check(self, system_text: str, user_text: str, max_tokens: int, label: str) -> bool:
        start = time.time()
        try:
            out = self.chat.simple_chat(user_text, system_text=system_text, max_tokens=max_tokens)
        except (OpenAIError, RuntimeError) as e:
            self.logger.error("%s FAILED: %s", label, e)
            return False

        elapsed_ms = (time.time() - start) * 1000.0
        self.logger.info("%s call completed in %.1f ms.", label, elapsed_ms)

        if out.get("usage") is not None:
            self.logger.info("%s usage: %s", label, out["usage"])

        content = (out.get("answer") or "").strip()
        if not content:
            self.logger.error("%s response content is empty.", label)
            return False

        self.logger.info("%s PASSED (preview: %.80r)", label, content)
        return True

    def run(self) -> bool:
        """
        Run a standard OpenAI Chat smoke test.
        """
        self.logger.info("Starting OpenAI Chat healthcheck with model: %s", self.chat.model)
        return self._check(
            "You are a connectivity check. Reply briefly to confirm connectivity.",
            "Say OK if you can read this.",
            10,
            "OpenAI Chat healthcheck",
        )

    def run_heavy_test(self, paragraphs: int = 20, max_tokens: int = 512) -> bool:
        """
        Heavier test to consume more tokens and verify usage metering.
        """
        base_paragraph = (
            "This is a longer healthcheck paragraph intended to increase token usage "
            "for testing OpenAI billing and usage metrics. It should be semantically "
            "coherent but not necessarily meaningful.\n"
        )
        return self._check(
            "You are an OpenAI check verifying API usage and billing. Respond concisely.",
            "Read the following text and summarise it in one sentence:\n\n" + base_paragraph * paragraphs,
            max_tokens,
            "OpenAI heavy healthcheck",
        )
