import logging
from typing import Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from dreampuff.assistant.schemas import CreateResponseInput, CreateResponseOutput
from dreampuff.config import get_settings
from dreampuff.exceptions import TransportError

logger = logging.getLogger(__name__)


class PromptServiceClient:
    """
    HTTP client for the external prompt-execution service.

    The service takes ``{type, entityName, products[]}`` and answers
    ``{response}``; prompt design and model choice live on its side.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.Client] = None,
    ):
        settings = get_settings()
        self.url = url or settings.PROMPT_SERVICE_URL
        self.client = client or httpx.Client(timeout=timeout or settings.PROMPT_SERVICE_TIMEOUT)

    def create_response(self, payload: CreateResponseInput) -> CreateResponseOutput:
        try:
            response = self.client.post(self.url, json=payload.model_dump(by_alias=True))
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Prompt service call failed: {e}")
            raise TransportError(f"Prompt service unavailable: {e}") from e

        try:
            return CreateResponseOutput.model_validate(data)
        except PydanticValidationError as e:
            logger.error(f"Prompt service returned an unexpected payload: {data!r}")
            raise TransportError("Prompt service returned an unexpected payload") from e

    def close(self) -> None:
        self.client.close()
