"""
意味アクションの登録と呼び出し（Semantic Registry）

規則ごとにただ1つのアクションを対応させる。アクションの引数の数が
規則の生成アリティと一致するかを、登録時（＝構築時）に検査する。

アクションの形:
    action(node, env, *children)
        node     ... その規則の CST ノード
        env      ... 評価中の環境
        children ... 子ノード（規則のアリティと同じ数）
字句規則（アリティ0）は子を持たず、node.source_string で照合文字列を得る。
"""
import inspect
from functools import partial
from typing import Any, Callable, Dict, Optional

from arith.cst import Node
from arith.errors import RecursionLimitError, RegistryError, UnregisteredRuleError
from arith.grammar import GrammarSpec

import logging
logger = logging.getLogger(__name__)

LEADING_PARAMS = 2  # node, env

DEFAULT_MAX_DEPTH = 1000  # 入れ子の深さ。子が1つだけのノードは数えない


def action_arity(action: Callable) -> int:
    """node, env を除いた位置引数の数。可変長引数は許さない"""
    params = list(inspect.signature(action).parameters.values())
    for p in params:
        if p.kind is p.VAR_POSITIONAL or p.kind is p.VAR_KEYWORD:
            raise RegistryError(f"Semantic action {action!r} must not take variable arguments")
        if p.kind is p.KEYWORD_ONLY and p.default is p.empty:
            raise RegistryError(f"Semantic action {action!r} has a required keyword-only parameter '{p.name}'")
    positional = [p for p in params if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)]
    return len(positional) - LEADING_PARAMS


class Semantics:
    """文法1つ分のアクション表"""

    def __init__(self, grammar: GrammarSpec):
        self.grammar = grammar
        self._actions: Dict[str, Callable] = {}

    def register(self, rule_name: str, action: Callable) -> None:
        if rule_name not in self.grammar:
            raise RegistryError(f"'{rule_name}' is not a rule of {self.grammar.name}")
        if rule_name in self._actions:
            raise RegistryError(f"Duplicate semantic action for rule '{rule_name}'")
        expected = self.grammar.arity(rule_name)
        actual = action_arity(action)
        if actual != expected:
            raise RegistryError(
                f"Semantic action for '{rule_name}' has arity {actual}, but the rule has arity {expected}")
        self._actions[rule_name] = action

    def action(self, rule_name: str):
        """register のデコレータ版"""
        def decorator(func):
            self.register(rule_name, func)
            return func
        return decorator

    def check_complete(self) -> None:
        missing = [name for name in self.grammar.rule_names if name not in self._actions]
        if missing:
            raise RegistryError(f"Missing semantic actions for rules: {', '.join(missing)}")

    def __contains__(self, rule_name: str) -> bool:
        return rule_name in self._actions

    def dispatch(self, node: Node, env) -> Any:
        action = self._actions.get(node.rule_name)
        if action is None:
            raise UnregisteredRuleError(node.rule_name)
        return action(node, env, *node.children)


class Operation:
    """
    規則名と同名のメソッドを意味アクションとする基底クラス

    class Interp(Operation, grammar=G) と宣言すると、クラス定義の時点で
    メソッド名と G の規則名の対応、アリティの一致、網羅性を検査する。
    補助メソッドは _ で始めること。
    """
    grammar: Optional[GrammarSpec] = None

    def __init_subclass__(cls, grammar: Optional[GrammarSpec] = None, **kwargs):
        super().__init_subclass__(**kwargs)
        if grammar is not None:
            cls.grammar = grammar
        if cls.grammar is None:
            return
        # クラス定義時の検査。self を None で埋めた関数で表を作ってみる
        probe = Semantics(cls.grammar)
        for name in cls._action_names():
            if name not in cls.grammar:
                raise RegistryError(f"{cls.__name__}.{name} does not name a rule of {cls.grammar.name}")
            probe.register(name, partial(getattr(cls, name), None))
        probe.check_complete()

    @classmethod
    def _action_names(cls):
        base = set(dir(Operation))
        return [name for name in dir(cls)
                if not name.startswith("_") and name not in base and callable(getattr(cls, name))]

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH):
        if self.grammar is None:
            raise RegistryError(f"{type(self).__name__} is not bound to a grammar")
        self.max_depth = max_depth
        self._depth = 0
        self.semantics = Semantics(self.grammar)
        for name in self.grammar.rule_names:
            self.semantics.register(name, getattr(self, name))
        self.semantics.check_complete()

    def visit(self, node: Node, env) -> Any:
        """ノードを評価する。_iter は子の結果のリストになる"""
        # exp -> add_exp のような委譲だけの段は深さに数えない
        nested = len(node.children) != 1
        if nested:
            self._depth += 1
        try:
            if self._depth > self.max_depth:
                raise RecursionLimitError(self.max_depth)
            if node.is_iteration:
                return [self.visit(child, env) for child in node.children]
            return self.semantics.dispatch(node, env)
        finally:
            if nested:
                self._depth -= 1
