from prompt_toolkit.completion import WordCompleter

from arith.environment import Environment

SHELL_COMMANDS = ['vars', 'parse', 'set', 'reset', 'help', 'exit', 'quit']


def arith_completer(env_source) -> WordCompleter:
    """
    環境に束縛された名前とシェルコマンドを補完候補にする

    Args:
        env_source: 現在の Environment を返す関数（reset で環境が差し替わるため）
    """
    def words():
        env: Environment = env_source()
        return sorted(env) + SHELL_COMMANDS
    return WordCompleter(words, ignore_case=False)
