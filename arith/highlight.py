from pygments.lexer import RegexLexer
from pygments.token import Name, Number, Operator, Punctuation, Text


class ArithLexer(RegexLexer):
    """入力中の式のシンタックスハイライト"""
    name = 'arith'
    aliases = ['arith']

    tokens = {
        'root': [
            # 数値 (NUMBER)
            (r'\d*\.\d+|\d+', Number),
            # 演算子 (+ - * / ^ =)
            (r'\+|-|\*|/|\^|=', Operator),
            # 区切り文字
            (r'[(),;]', Punctuation),
            # 関数呼び出し (IDENT の直後に "(")
            (r'[^\W\d_][^\W_]*(?=\s*\()', Name.Function),
            # 変数・定数 (IDENT)
            (r'[^\W\d_][^\W_]*', Name.Variable),
            # 空白
            (r'\s+', Text),
        ]
    }
