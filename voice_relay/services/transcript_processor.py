"""
Post-call processing of call transcripts.

When a call ends its transcript is summarized by a chat completion that extracts
the caller's details, and the resulting JSON object is posted to the configured
notification webhook. Every failure is logged and swallowed so that one bad call
never affects cleanup of the others.
"""

import json
import logging
from typing import Any, Dict, Optional

import httpx

from voice_relay.config.constants import (
    DEFAULT_SUMMARY_MODEL,
    HTTP_TIMEOUT,
    LOGGER_NAME,
    OPENAI_CHAT_COMPLETIONS_URL,
)

logger = logging.getLogger(LOGGER_NAME)

EXTRACTION_INSTRUCTION = (
    "Extract customer details: name, availability, and any special notes from the "
    "transcript. Respond with a JSON object with the keys name, availability and notes."
)


class TranscriptProcessor:
    """
    Summarizes finished transcripts and forwards the result to a webhook.

    Args:
        api_key: OpenAI API key
        webhook_url: Endpoint receiving the extracted details
        model: Chat completion model
        timeout: Timeout in seconds for each HTTP request
        transport: Optional httpx transport, used to stub the network in tests
    """

    def __init__(self, api_key: str, webhook_url: str, model: str = DEFAULT_SUMMARY_MODEL,
                 timeout: float = HTTP_TIMEOUT,
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 completions_url: str = OPENAI_CHAT_COMPLETIONS_URL):
        self.api_key = api_key
        self.webhook_url = webhook_url
        self.model = model
        self.timeout = timeout
        self.completions_url = completions_url
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def summarize(self, transcript: str) -> Dict[str, Any]:
        """Request the extraction completion and return the decoded response body."""
        async with self._client() as client:
            response = await client.post(
                self.completions_url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={
                    "model": self.model,
                    "messages": [
                        {"role": "system", "content": EXTRACTION_INSTRUCTION},
                        {"role": "user", "content": transcript},
                    ],
                    "response_format": {"type": "json_object"},
                },
            )
        response.raise_for_status()
        data = response.json()
        logger.debug(f"Chat completion response: {data}")
        return data

    @staticmethod
    def extract_details(completion: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Parse the structured details out of a chat completion.

        Returns:
            The decoded JSON object, or None if the completion has no content

        Raises:
            json.JSONDecodeError: If the content is not valid JSON
        """
        try:
            content = completion["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            logger.error("Unexpected response structure from chat completion API")
            return None
        if not content:
            logger.error("Chat completion returned no content")
            return None
        return json.loads(content)

    async def send_to_webhook(self, payload: Dict[str, Any]) -> int:
        """POST the extracted details to the notification webhook and return the status."""
        async with self._client() as client:
            response = await client.post(self.webhook_url, json=payload)
        logger.info(f"Webhook response: {response.status_code}")
        return response.status_code

    async def process(self, transcript: str, call_id: str) -> Optional[Dict[str, Any]]:
        """
        Summarize a transcript and send the extracted details to the webhook.

        Args:
            transcript: Full call transcript
            call_id: Identifier of the finished call, used for logging

        Returns:
            The details sent to the webhook, or None if nothing was sent
        """
        if not transcript.strip():
            logger.info(f"Empty transcript for call {call_id}, skipping post-processing")
            return None

        try:
            completion = await self.summarize(transcript)
            details = self.extract_details(completion)
            if not details:
                return None
            await self.send_to_webhook(details)
            logger.info(f"Extracted and sent customer details for call {call_id}: {details}")
            return details
        except Exception as e:
            logger.error(f"Error processing transcript for call {call_id}: {e}", exc_info=True)
            return None
