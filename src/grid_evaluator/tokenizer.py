import re
from enum import Enum, auto
from typing import List, NamedTuple

from grid_evaluator.addressing import is_address, normalize
from grid_evaluator.config import OPERATORS
from grid_evaluator.errors import InvalidAddressError


class TokenType(Enum):
    NUMBER = auto()
    OPERATOR = auto()
    CELL_REF = auto()
    INVALID = auto()


class Token(NamedTuple):
    type: TokenType
    value: str
    # Index of the token within the expression, after skipping blanks
    position: int


class PostfixTokenizer:
    NUMBER_REGEX = re.compile(r"^-?[0-9]+(\.[0-9]+)?$")

    def __init__(self, expression: str):
        self.expression = expression

    def tokenize(self) -> List[Token]:
        """Split the expression on whitespace and classify every token.

        Unrecognized input never raises, it produces `TokenType.INVALID` tokens
        so that callers can absorb the error as data.
        """
        tokens = []
        for word in self.expression.split():
            tokens.append(self._classify(word, len(tokens)))
        return tokens

    def _classify(self, word: str, position: int) -> Token:
        if word in OPERATORS:
            return Token(TokenType.OPERATOR, word, position)
        if self.NUMBER_REGEX.match(word):
            return Token(TokenType.NUMBER, word, position)
        if is_address(word):
            try:
                return Token(TokenType.CELL_REF, normalize(word), position)
            except InvalidAddressError:
                # Well-formed but unaddressable, e.g. `A0` or a column past `ZZZ`.
                # Keep the raw text so the analyzer reports it as out of bounds.
                return Token(TokenType.CELL_REF, word.upper(), position)
        return Token(TokenType.INVALID, word, position)


def tokenize(expression: str) -> List[Token]:
    """Helper function to tokenize a postfix expression."""
    return PostfixTokenizer(expression).tokenize()
