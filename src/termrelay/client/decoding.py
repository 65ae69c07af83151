"""Decoding of execution server responses.

An ``error`` field in a JSON object body always wins over any other
field, whatever the HTTP status. Only after that is the body validated
against the expected response model.
"""

from __future__ import annotations

import json
import logging
from typing import TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from termrelay.client.errors import ParseError, ResponseError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def decode_object(response: httpx.Response) -> dict:
    """Decode a response body into a JSON object.

    Raises:
        ResponseError: If the body is empty or carries an ``error`` field.
        ParseError: If the body is not JSON or not a JSON object.
    """
    if not response.content:
        raise ResponseError("No data received")

    try:
        payload = json.loads(response.content)
    except ValueError as e:
        raise ParseError(f"JSON parsing error: {e}") from e

    if not isinstance(payload, dict):
        raise ParseError("Could not parse response")

    error = payload.get("error")
    if error is not None:
        message = error if isinstance(error, str) else json.dumps(error)
        raise ResponseError(message)

    return payload


def decode_model(response: httpx.Response, model: type[ModelT]) -> ModelT:
    """Decode a response body and validate it against ``model``."""
    payload = decode_object(response)
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        logger.debug("Unexpected %s body: %s", model.__name__, e)
        message = "Invalid response format"
        if response.is_error:
            message = f"{message} (HTTP {response.status_code})"
        raise ResponseError(message) from e
