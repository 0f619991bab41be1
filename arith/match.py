"""
照合エンジン（Lark）のアダプタ

文法定義を Lark の文法に書き出して LALR パーサを作り、入力を CST に変換する。
入力が一致しない場合は、位置と期待された構文の説明を持つ MatchFailure を送出する。
"""
from functools import lru_cache
from typing import Dict, Optional, Set

from lark import Lark
from lark.exceptions import GrammarError, UnexpectedEOF, UnexpectedInput, UnexpectedToken

from arith.cst import Node, from_lark
from arith.errors import GrammarSpecError, MatchFailure, describe_expected
from arith.grammar import GrammarSpec

import logging
logger = logging.getLogger(__name__)

END_OF_INPUT = "$END"
IGNORED = {"WS"}


class Matcher:
    """1つの文法に対する照合器。開始規則ごとにパーサをキャッシュする"""

    def __init__(self, grammar: GrammarSpec):
        self.grammar = grammar
        self.source = grammar.to_lark()
        self._parsers: Dict[str, Lark] = {}
        self._lexical = frozenset(grammar.lexical_names)
        self._iterations = frozenset(grammar.list_rules)
        logger.debug(f"Lark grammar for {grammar.name}:\n{self.source}")

    def parser(self, start: str) -> Lark:
        if start not in self._parsers:
            if start not in self.grammar or self.grammar[start].is_lexical:
                raise GrammarSpecError(f"'{start}' is not a syntactic rule of {self.grammar.name}")
            try:
                self._parsers[start] = Lark(
                    self.source,
                    parser="lalr",
                    start=start,
                    keep_all_tokens=True,   # リテラルも子ノードとして残す（アリティを保つ）
                    maybe_placeholders=False,
                )
            except GrammarError as e:
                raise GrammarSpecError(f"{self.grammar.name}: {e}") from e
        return self._parsers[start]

    def match(self, text: str, start: Optional[str] = None) -> Node:
        start = start or self.grammar.start
        parser = self.parser(start)
        try:
            tree = parser.parse(text)
        except UnexpectedInput as e:
            raise self._failure(e, text, parser) from None

        node = from_lark(tree, text, self._lexical, self._iterations)
        logger.debug(f"match {start}: {text!r}\n{node.pretty()}")
        return node

    # --- 失敗の説明 ---
    def _failure(self, e: UnexpectedInput, text: str, parser: Lark) -> MatchFailure:
        if isinstance(e, UnexpectedEOF):
            position = len(text)
        elif isinstance(e, UnexpectedToken):
            position = len(text) if e.token.type == END_OF_INPUT else e.token.start_pos
        else:
            position = e.pos_in_stream

        names = self._accepts(parser, text, position) or getattr(e, "expected", None) or ()
        descriptions = sorted({self._describe(name, parser) for name in names if name not in IGNORED})

        line = text.count("\n", 0, position) + 1
        line_start = text.rfind("\n", 0, position) + 1
        column = position - line_start + 1
        line_end = text.find("\n", position)
        excerpt = text[line_start:] if line_end < 0 else text[line_start:line_end]
        context = f"> {excerpt}\n  {' ' * (column - 1)}^"

        failure = MatchFailure(position, describe_expected(descriptions), line, column, context)
        logger.debug(f"match failed: {failure.message}")
        return failure

    def _accepts(self, parser: Lark, text: str, position: int) -> Set[str]:
        """
        失敗位置の直前の状態で受理できる終端記号

        LALR は先読みの合併で失敗前に還元を進めてしまう（"(1" では ")" しか残らない）。
        失敗したトークンを送る前の状態まで入力をたどり直して集める。
        """
        interactive = parser.parse_interactive(text)
        try:
            for token in interactive.iter_parse():
                if token.start_pos >= position:
                    break
        except UnexpectedInput:
            # 失敗は既に分かっている。ここまでに送ったトークンの状態を使う
            pass
        return interactive.accepts()

    def _describe(self, name: str, parser: Lark) -> str:
        if name == END_OF_INPUT:
            return "end of input"
        if name in self._lexical:
            return self.grammar.description(name)
        try:
            pattern = parser.get_terminal(name).pattern
        except KeyError:
            return name
        if pattern.type == "str":
            return f'"{pattern.value}"'
        return name


@lru_cache(maxsize=None)
def matcher_for(grammar: GrammarSpec) -> Matcher:
    return Matcher(grammar)


def match(grammar: GrammarSpec, text: str, start: Optional[str] = None) -> Node:
    """
    入力を文法の開始規則に照合して CST を返す

    Raises:
        MatchFailure: 入力が一致しない
    """
    return matcher_for(grammar).match(text, start)
