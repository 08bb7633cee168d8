"""
Ordered-strategy parsing: structured decoding first, heuristics after.
"""
import json
from typing import Any, Callable, Generic, List, Sequence, Type, TypeVar

from loguru import logger
from pydantic import BaseModel, ValidationError

from ..exceptions import DecodeFailed

T = TypeVar("T")
D = TypeVar("D", bound=BaseModel)

Strategy = Callable[[bytes], List[T]]


class StrategyParser(Generic[T]):
    """
    Tries each strategy in order; the first one that does not raise
    DecodeFailed provides the result. Later strategies are never consulted
    once an earlier one succeeds.
    """
    def __init__(self, name: str, strategies: Sequence[Strategy]):
        """
        Initializes the parser.

        :param name: Label used in log messages.
        :param strategies: Callables turning raw output into records.
        """
        self.name = name
        self.strategies = list(strategies)

    def parse(self, raw: bytes) -> List[T]:
        """
        Parses raw command output.

        :param raw: Bytes produced by one CLI invocation.
        :return: Parsed records, empty when no strategy could decode the output.
        """
        for strategy in self.strategies:
            try:
                return strategy(raw)
            except DecodeFailed as e:
                logger.debug("{}: {} declined output ({})", self.name, _strategy_name(strategy), e)
        return []


def _strategy_name(strategy: Callable[..., Any]) -> str:
    return getattr(strategy, "__name__", repr(strategy))


def decode_json_array(raw: bytes) -> List[Any]:
    """
    Decodes bytes as a JSON array.

    Invalid UTF-8 sequences are replaced rather than rejected, so one bad
    byte in a string value does not cost the whole document.

    :param raw: Raw command output.
    :return: The decoded list.
    :raises DecodeFailed: When the text is not JSON or not an array.
    """
    try:
        data = json.loads(raw.decode("utf-8", errors="replace"))
    except (json.JSONDecodeError, RecursionError) as e:
        raise DecodeFailed(str(e)) from e
    if not isinstance(data, list):
        raise DecodeFailed(f"expected a JSON array, got {type(data).__name__}")
    return data


def validate_items(items: List[Any], model: Type[D], label: str) -> List[D]:
    """
    Validates each decoded element on its own, skipping the ones that fail.

    :param items: Decoded JSON elements.
    :param model: Descriptor model to validate against.
    :param label: Record kind used in log messages.
    :return: Valid descriptors, in input order.
    """
    descriptors = []
    for index, item in enumerate(items):
        try:
            descriptors.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning("Skipping malformed {} record #{}: {} error(s)", label, index, e.error_count())
    return descriptors


def text_lines(raw: bytes) -> List[str]:
    """
    Splits raw output into lines, decoding invalid UTF-8 with replacement.

    :param raw: Raw command output.
    :return: Lines without their terminators.
    """
    return raw.decode("utf-8", errors="replace").splitlines()


def split_fields(line: str) -> List[str]:
    """
    Splits a line on single spaces, dropping empty fields.

    :param line: One line of tabular output.
    :return: Non-empty space-separated tokens.
    """
    return [part for part in line.split(" ") if part]
