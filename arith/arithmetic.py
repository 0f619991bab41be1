"""
四則演算・べき乗・代入・関数呼び出しの文法 (Arithmetic v1.0)

優先順位は規則の階層で表す:
    exp -> assign_exp -> add_exp -> mul_exp -> exp_exp -> pri_exp
各層は被演算子として一つ内側（より強く結合する）の層だけを参照する。
+ - * / は左再帰で左結合、^ は右側の自己参照で右結合になる。
"""
from arith.grammar import Alt, GrammarSpec, ListOf, Lit, Pattern, Ref, Rule

GRAMMAR_NAME = "Arithmetic"
GRAMMAR_VERSION = "1.0"

RULES = [
    Rule("exp",
         Alt(Ref("assign_exp"))),

    Rule("assign_exp",
         Alt(Ref("IDENT"), Lit("="), Ref("add_exp"), label="assign"),
         Alt(Ref("add_exp"))),

    Rule("add_exp",
         Alt(Ref("add_exp"), Lit("+"), Ref("mul_exp"), label="plus"),
         Alt(Ref("add_exp"), Lit("-"), Ref("mul_exp"), label="minus"),
         Alt(Ref("mul_exp"))),

    Rule("mul_exp",
         Alt(Ref("mul_exp"), Lit("*"), Ref("exp_exp"), label="times"),
         Alt(Ref("mul_exp"), Lit("/"), Ref("exp_exp"), label="divide"),
         Alt(Ref("exp_exp"))),

    Rule("exp_exp",
         Alt(Ref("pri_exp"), Lit("^"), Ref("exp_exp"), label="power"),
         Alt(Ref("pri_exp"))),

    Rule("pri_exp",
         Alt(Lit("("), Ref("exp"), Lit(")"), label="paren"),
         Alt(Lit("+"), Ref("pri_exp"), label="pos"),
         Alt(Lit("-"), Ref("pri_exp"), label="neg"),
         Alt(Ref("IDENT"), Lit("("), ListOf("exp", ","), Lit(")"), label="call"),
         Alt(Ref("IDENT")),
         Alt(Ref("NUMBER"))),

    # 複数の式を ; で区切って順に評価する
    Rule("program",
         Alt(ListOf("exp", ";"))),

    # 字句規則。description は照合失敗時のメッセージに使う
    Rule("IDENT",
         Alt(Pattern(r"[^\W\d_][^\W_]*")),
         description="an identifier"),

    Rule("NUMBER",
         Alt(Pattern(r"\d*\.\d+")),
         Alt(Pattern(r"\d+")),
         description="a number"),
]

ARITHMETIC = GrammarSpec(GRAMMAR_NAME, GRAMMAR_VERSION, RULES, start="exp")
