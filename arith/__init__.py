"""
arith - 文法駆動の数式インタプリタ

    >>> from arith import evaluate, standard_environment
    >>> env = standard_environment()
    >>> evaluate("x = 2 ^ 3 ^ 2", env)
    512.0
    >>> evaluate("x / 2", env)
    256.0
"""
from arith.arithmetic import ARITHMETIC
from arith.cst import Node
from arith.environment import (
    Binding,
    BindingKind,
    Constant,
    Environment,
    Function,
    Variable,
    standard_environment,
)
from arith.errors import (
    ArithError,
    ArityMismatchError,
    EvalError,
    GrammarSpecError,
    MatchFailure,
    NotAValueError,
    NotCallableError,
    ReadOnlyNameError,
    RecursionLimitError,
    RegistryError,
    UndefinedNameError,
    UnregisteredRuleError,
)
from arith.grammar import Alt, GrammarSpec, ListOf, Lit, Pattern, Ref, Rule
from arith.interpreter import ArithInterpreter, evaluate, run
from arith.match import match
from arith.printer import Parenthesizer, parenthesize
from arith.semantics import Operation, Semantics

__version__ = "0.1.0"
