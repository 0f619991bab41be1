"""
具象構文木 (CST) のノード

Lark の Tree/Token を、規則名・子ノード・照合した部分文字列を持つ
不変のノードに変換する。
"""
from dataclasses import dataclass
from typing import Collection, Iterator, Tuple

from lark import Token, Tree

TERMINAL = "_terminal"   # "+" などのリテラル
ITERATION = "_iter"      # ListOf の並び


@dataclass(frozen=True)
class Node:
    rule_name: str
    children: Tuple["Node", ...]
    source_string: str
    start: int
    end: int

    @property
    def is_terminal(self) -> bool:
        return self.rule_name == TERMINAL

    @property
    def is_iteration(self) -> bool:
        return self.rule_name == ITERATION

    def __len__(self) -> int:
        return len(self.children)

    def __iter__(self) -> Iterator["Node"]:
        return iter(self.children)

    def pretty(self, indent: str = "  ") -> str:
        """Lark の Tree.pretty() と同じ形式の字下げ表示"""
        lines = []
        stack = [(self, 0)]
        while stack:
            node, level = stack.pop()
            if not node.children:
                lines.append(f"{indent * level}{node.rule_name}\t{node.source_string!r}")
                continue
            lines.append(f"{indent * level}{node.rule_name}")
            for child in reversed(node.children):
                stack.append((child, level + 1))
        return "\n".join(lines)


def from_lark(tree: Tree, text: str, lexical: Collection[str], iterations: Collection[str]) -> Node:
    """
    Lark の構文木を Node に変換する

    深い入れ子でも Python の再帰上限に当たらないよう、明示的なスタックで
    後順に辿る。

    Args:
        tree: keep_all_tokens=True で得た構文木
        text: 入力文字列（source_string の切り出し元）
        lexical: 字句規則の名前（これ以外のトークンは _terminal）
        iterations: ListOf の補助規則の名前（_iter に置き換える）
    """
    stack = [(tree, False)]
    done = []
    last_end = 0

    while stack:
        item, expanded = stack.pop()

        if isinstance(item, Token):
            name = item.type if item.type in lexical else TERMINAL
            start, end = item.start_pos, item.end_pos
            done.append(Node(name, (), text[start:end], start, end))
            last_end = end
            continue

        if not expanded:
            stack.append((item, True))
            for child in reversed(item.children):
                stack.append((child, False))
            continue

        count = len(item.children)
        converted = tuple(done[len(done) - count:])
        del done[len(done) - count:]

        if converted:
            start, end = converted[0].start, converted[-1].end
        else:
            start = end = last_end

        rule_name = str(item.data)
        children = converted
        if rule_name in iterations:
            rule_name = ITERATION
            children = tuple(c for c in converted if not c.is_terminal)
        done.append(Node(rule_name, children, text[start:end], start, end))

    return done[0]
