import httpx
import orjson

from src.platform.exception.exceptions import UnauthenticatedError


def error_message(response: httpx.Response) -> str:
    """The server's `message` field when the body carries one, else the status line."""
    try:
        body = orjson.loads(response.content)
    except orjson.JSONDecodeError:
        body = None
    if isinstance(body, dict) and body.get('message'):
        return str(body['message'])
    return f'{response.status_code} {response.reason_phrase}'


def raise_if_unauthenticated(response: httpx.Response) -> None:
    if response.status_code in (401, 403):
        raise UnauthenticatedError(error_message(response))
