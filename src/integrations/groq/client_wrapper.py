from groq import AsyncGroq, APIConnectionError, APIError, APIStatusError, APITimeoutError
from typing import Any, Dict, List, Optional
from datetime import datetime
import asyncio
import logging
import os
from dotenv import load_dotenv

from src.task_parsing.errors import GenerationUnavailable

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "llama-3.3-70b-versatile"


class EnhancedGroqClient:
    """Groq chat-completion client with retry logic and recoverable errors."""

    def __init__(self, api_key: Optional[str] = None, retry_count: int = 1, retry_delay: float = 1.0):
        """
        Initialize the client with an API key from the argument or environment.

        Raises:
            GenerationUnavailable: If no API key is configured
        """
        load_dotenv(override=False)
        self.api_key = api_key or os.getenv('GROQ_API_KEY')
        if not self.api_key:
            raise GenerationUnavailable("GROQ_API_KEY must be provided either through initialization or environment")

        self.retry_count = retry_count
        self.retry_delay = retry_delay
        # Retries are handled here so the backoff is visible in our logs
        self.client = AsyncGroq(api_key=self.api_key, max_retries=0)

    async def process_with_retry(self,
                                 messages: List[Dict],
                                 model: str = DEFAULT_MODEL,
                                 timeout: Optional[float] = None,
                                 **kwargs) -> Any:
        """Send a chat completion request, retrying transient failures.

        Args:
            messages: Conversation messages
            model: Model name
            timeout: Per-attempt request timeout in seconds
            **kwargs: Additional parameters for the API call

        Returns:
            Raw SDK completion response

        Raises:
            GenerationUnavailable: When every attempt fails or the error is not retryable
        """
        start_time = datetime.now()
        attempts = self.retry_count + 1
        params = {
            'model': model,
            'messages': messages,
            'temperature': kwargs.pop('temperature', 0.2),
            'max_completion_tokens': kwargs.pop('max_completion_tokens', 1024),
            **kwargs
        }
        if timeout is not None:
            params['timeout'] = timeout

        for attempt in range(1, attempts + 1):
            try:
                response = await self.client.chat.completions.create(**params)

                duration = (datetime.now() - start_time).total_seconds()
                logger.debug(f"Groq request to {model} succeeded in {duration:.3f}s (attempt {attempt})")
                return response

            except (APIConnectionError, APITimeoutError, APIStatusError) as e:
                retryable = not isinstance(e, APIStatusError) or e.status_code == 429 or e.status_code >= 500
                if not retryable or attempt == attempts:
                    logger.error(f"Groq request failed after {attempt} attempt(s): {e}")
                    raise GenerationUnavailable(f"Generation failed after {attempt} attempt(s): {e}") from e

                wait_time = self.retry_delay * (2 ** (attempt - 1))
                logger.warning(f"Attempt {attempt} failed: {e}. Waiting {wait_time} seconds before retry...")
                await asyncio.sleep(wait_time)

            except APIError as e:
                logger.error(f"Groq API error: {e}")
                raise GenerationUnavailable(f"Generation failed: {e}") from e

    async def complete(self,
                       system_prompt: str,
                       user_text: str,
                       model: str = DEFAULT_MODEL,
                       temperature: float = 0.2,
                       max_tokens: int = 1024,
                       timeout: Optional[float] = None) -> str:
        """Run a system + user prompt and return the completion text.

        Raises:
            GenerationUnavailable: On transport failure, empty output or a content-filter stop
        """
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_text},
        ]
        response = await self.process_with_retry(
            messages=messages,
            model=model,
            timeout=timeout,
            temperature=temperature,
            max_completion_tokens=max_tokens,
        )

        if not response.choices:
            raise GenerationUnavailable("Completion contained no choices")

        choice = response.choices[0]
        if choice.finish_reason == "content_filter":
            raise GenerationUnavailable("Completion was rejected by the provider's content filter")

        content = choice.message.content or ""
        if not content.strip():
            raise GenerationUnavailable("Completion was empty")

        logger.debug(f"Received completion of {len(content)} characters (finish_reason={choice.finish_reason})")
        return content
