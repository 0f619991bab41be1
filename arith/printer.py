"""
式を完全に括弧付けした文字列に戻す操作

優先順位と結合性がどう解決されたかを確認するためのもの。
    2^3^2   -> (2 ^ (3 ^ 2))
    10-3-2  -> ((10 - 3) - 2)
"""
from arith.arithmetic import ARITHMETIC
from arith.match import match
from arith.semantics import Operation


class Parenthesizer(Operation, grammar=ARITHMETIC):

    def exp(self, node, env, e): return self.visit(e, env)
    def assign_exp(self, node, env, e): return self.visit(e, env)
    def add_exp(self, node, env, e): return self.visit(e, env)
    def mul_exp(self, node, env, e): return self.visit(e, env)
    def exp_exp(self, node, env, e): return self.visit(e, env)
    def pri_exp(self, node, env, e): return self.visit(e, env)

    def assign_exp_assign(self, node, env, name, _eq, value):
        return f"{name.source_string} = {self.visit(value, env)}"

    def add_exp_plus(self, node, env, x, op, y): return self._binary(env, x, op, y)
    def add_exp_minus(self, node, env, x, op, y): return self._binary(env, x, op, y)
    def mul_exp_times(self, node, env, x, op, y): return self._binary(env, x, op, y)
    def mul_exp_divide(self, node, env, x, op, y): return self._binary(env, x, op, y)
    def exp_exp_power(self, node, env, x, op, y): return self._binary(env, x, op, y)

    # 元の括弧は捨てる。必要な括弧は演算子側で付け直す
    def pri_exp_paren(self, node, env, _l, e, _r): return self.visit(e, env)
    def pri_exp_pos(self, node, env, op, e): return f"(+{self.visit(e, env)})"
    def pri_exp_neg(self, node, env, op, e): return f"(-{self.visit(e, env)})"

    def pri_exp_call(self, node, env, callee, _l, args, _r):
        return f"{callee.source_string}({', '.join(self.visit(args, env))})"

    def IDENT(self, node, env): return node.source_string
    def NUMBER(self, node, env): return node.source_string

    def program(self, node, env, statements):
        return "; ".join(self.visit(statements, env))

    def _binary(self, env, x, op, y):
        return f"({self.visit(x, env)} {op.source_string} {self.visit(y, env)})"


def parenthesize(source: str) -> str:
    """式（または ; 区切りの並び）を括弧付けした文字列にする"""
    node = match(ARITHMETIC, source, "program")
    return Parenthesizer().visit(node, None)
