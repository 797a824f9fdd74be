import base64
import binascii
import math
import re
from typing import Annotated, Any, Dict, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, BeforeValidator, Field, ValidationError, field_validator

from mailaction.services.errors import PayloadValidationError

MAILBOX_PATTERN = re.compile(r"[0-9a-f]{24}")
MESSAGE_PATTERN = re.compile(r"[0-9]+(,[0-9]+)*")

TRUTHY_TOKENS = {"Y", "true", "yes", "on", "1"}
FALSY_TOKENS = {"N", "false", "no", "off", "0", ""}
CURSOR_TYPES = ("next", "previous")

# framework anti-forgery field, never forwarded to the backend
CSRF_FIELD = "_csrf"

ModelT = TypeVar("ModelT", bound=BaseModel)


def _object_id(value: Any) -> str:
    if not isinstance(value, str) or not MAILBOX_PATTERN.fullmatch(value):
        raise ValueError("must be a 24 character lowercase hex string")
    return value


def _message_selector(value: Any) -> str:
    if not isinstance(value, str) or not MESSAGE_PATTERN.fullmatch(value):
        raise ValueError("must be a comma separated list of message ids")
    return value


def _flag(value: Any) -> Optional[bool]:
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        if value in TRUTHY_TOKENS:
            return True
        if value in FALSY_TOKENS:
            return False
    raise ValueError("must be a boolean")


ObjectId = Annotated[str, BeforeValidator(_object_id)]
MessageSelector = Annotated[str, BeforeValidator(_message_selector)]
Flag = Annotated[Optional[bool], BeforeValidator(_flag)]


class MessageSelection(BaseModel):
    mailbox: ObjectId
    message: MessageSelector


class ToggleFlaggedRequest(MessageSelection):
    flagged: Flag = None


class ToggleSeenRequest(MessageSelection):
    seen: Flag = None


class MoveRequest(MessageSelection):
    target: ObjectId


class DeleteRequest(MessageSelection):
    pass


class ListRequest(BaseModel):
    mailbox: ObjectId
    cursor_type: Optional[str] = Field(None, alias="cursorType")
    cursor_value: Optional[str] = Field(None, alias="cursorValue")
    page: Union[int, float] = 1

    @field_validator("cursor_type", mode="before")
    @classmethod
    def check_cursor_type(cls, value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        if value not in CURSOR_TYPES:
            raise ValueError("must be one of next, previous")
        return value

    @field_validator("cursor_value", mode="before")
    @classmethod
    def check_cursor_value(cls, value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        if not isinstance(value, str) or len(value) % 4:
            raise ValueError("must be a valid base64 string")
        try:
            base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError):
            raise ValueError("must be a valid base64 string")
        return value

    @field_validator("page", mode="before")
    @classmethod
    def check_page(cls, value: Any) -> Union[int, float]:
        if value is None or value == "":
            return 1
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            raise ValueError("must be a number")
        if isinstance(value, str):
            try:
                value = int(value)
            except ValueError:
                try:
                    value = float(value)
                except ValueError:
                    raise ValueError("must be a number")
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError("must be a number")
        return value

    def cursor_params(self) -> Dict[str, str]:
        # a direction without a value is not forwarded
        if self.cursor_type and self.cursor_value:
            return {self.cursor_type: self.cursor_value}
        return {}


def sanitize_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    data = dict(payload)
    data.pop(CSRF_FIELD, None)
    return data


def format_validation_error(error: ValidationError) -> str:
    messages: List[str] = []
    for err in error.errors():
        field = ".".join(str(p) for p in err["loc"]) or "value"
        if err["type"] == "missing":
            messages.append(f'"{field}" is required')
        elif err["type"] == "value_error":
            messages.append(f'"{field}" {err["ctx"]["error"]}')
        else:
            messages.append(f'"{field}" {err["msg"][:1].lower()}{err["msg"][1:]}')
    return ". ".join(messages)


def validate_payload(model: Type[ModelT], payload: Dict[str, Any]) -> ModelT:
    """Validate a raw request body against ``model``.

    Every field error is collected into one message; unknown fields are
    ignored and the anti-forgery token is stripped first.
    """
    try:
        return model.model_validate(sanitize_payload(payload))
    except ValidationError as e:
        raise PayloadValidationError(format_validation_error(e))
