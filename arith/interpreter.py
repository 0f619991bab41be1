"""
式の評価（ArithInterpreter）

Arithmetic 文法の CST を環境に対して評価し、浮動小数点の値を返す。
    evaluate("1 + 2 * 3", env)      -> 7.0
    run("x = 2; y = x ^ 10", env)   -> 1024.0

0 での割り算や桁あふれはエラーにせず、IEEE 754 の inf, nan をそのまま返す。
"""
import sys
import threading
from typing import Optional

import numpy as np

from arith.arithmetic import ARITHMETIC
from arith.cst import Node
from arith.environment import Environment
from arith.errors import RecursionLimitError
from arith.match import match
from arith.semantics import DEFAULT_MAX_DEPTH, Operation

import logging
logger = logging.getLogger(__name__)


class ArithInterpreter(Operation, grammar=ARITHMETIC):
    """式の値を計算する。値はすべて浮動小数点 (numpy.float64)"""

    # --- 合成規則：唯一の子をそのまま評価 ---
    def exp(self, node, env, e): return self.visit(e, env)
    def assign_exp(self, node, env, e): return self.visit(e, env)
    def add_exp(self, node, env, e): return self.visit(e, env)
    def mul_exp(self, node, env, e): return self.visit(e, env)
    def exp_exp(self, node, env, e): return self.visit(e, env)
    def pri_exp(self, node, env, e): return self.visit(e, env)

    # --- 代入系 ---
    def assign_exp_assign(self, node, env, name, _eq, value):
        # assign: IDENT "=" add_exp
        # 右辺を評価してから変数を束縛し、代入した値を式の値とする
        result = self.visit(value, env)
        return env.assign(name.source_string, result)

    # --- 演算系 ---
    def add_exp_plus(self, node, env, x, _op, y): return self.visit(x, env) + self.visit(y, env)
    def add_exp_minus(self, node, env, x, _op, y): return self.visit(x, env) - self.visit(y, env)
    def mul_exp_times(self, node, env, x, _op, y): return self.visit(x, env) * self.visit(y, env)
    def mul_exp_divide(self, node, env, x, _op, y): return self.visit(x, env) / self.visit(y, env)
    def exp_exp_power(self, node, env, x, _op, y): return np.power(self.visit(x, env), self.visit(y, env))

    def pri_exp_paren(self, node, env, _l, e, _r): return self.visit(e, env)
    def pri_exp_pos(self, node, env, _op, e): return self.visit(e, env)
    def pri_exp_neg(self, node, env, _op, e): return -self.visit(e, env)

    # --- 関数呼び出し ---
    def pri_exp_call(self, node, env, callee, _l, args, _r):
        # call: IDENT "(" ListOf<exp, ","> ")"
        # 名前と引数の数を先に検査し、引数は左から順に評価する
        function = env.function(callee.source_string, len(args.children))
        values = [self.visit(arg, env) for arg in args.children]
        logger.debug(f"call {function.name}{tuple(float(v) for v in values)}")
        return np.float64(function(*values))

    # --- プリミティブ・変数参照 ---
    def IDENT(self, node, env):
        return env.value(node.source_string)

    def NUMBER(self, node, env):
        return np.float64(node.source_string)

    def program(self, node, env, statements):
        # 文を順に評価し、最後の結果を返す。途中で失敗しても、それまでの代入は残る
        last_result = None
        for statement in statements.children:
            last_result = self.visit(statement, env)
        return last_result


RECURSION_LIMIT = 10000    # 評価中の Python の再帰上限（これより低ければ一時的に引き上げる）

_interpreters = threading.local()


def interpreter_for(max_depth: int = DEFAULT_MAX_DEPTH) -> ArithInterpreter:
    """max_depth ごとに1つの ArithInterpreter を使い回す（スレッドごと）"""
    cache = getattr(_interpreters, "cache", None)
    if cache is None:
        cache = _interpreters.cache = {}
    if max_depth not in cache:
        cache[max_depth] = ArithInterpreter(max_depth)
    return cache[max_depth]


def interpret(interpreter: Operation, node: Node, env: Environment):
    """IEEE 754 の特殊値（inf, nan）は警告なしでそのまま伝播させる"""
    previous = sys.getrecursionlimit()
    if previous < RECURSION_LIMIT:
        sys.setrecursionlimit(RECURSION_LIMIT)
    try:
        with np.errstate(all="ignore"):
            return interpreter.visit(node, env)
    except RecursionError:
        raise RecursionLimitError(interpreter.max_depth) from None
    finally:
        if previous < RECURSION_LIMIT:
            sys.setrecursionlimit(previous)


def evaluate(expression: str, env: Environment, max_depth: int = DEFAULT_MAX_DEPTH) -> float:
    """
    式を1つ評価する

    Raises:
        MatchFailure: 構文エラー
        EvalError: 未定義の名前、呼び出しの誤り、再帰の上限超過など
    """
    node = match(ARITHMETIC, expression, "exp")
    result = interpret(interpreter_for(max_depth), node, env)
    logger.debug(f"evaluate {expression!r} -> {result}")
    return float(result)


def run(source: str, env: Environment, max_depth: int = DEFAULT_MAX_DEPTH) -> Optional[float]:
    """
    ; で区切った複数の式を順に評価し、最後の値を返す（空なら None）

    途中の式が失敗した場合、それより前の代入は環境に残る（巻き戻しはしない）。
    """
    node = match(ARITHMETIC, source, "program")
    result = interpret(interpreter_for(max_depth), node, env)
    logger.debug(f"run {source!r} -> {result}")
    return None if result is None else float(result)
