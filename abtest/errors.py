
class ConfigurationError(ValueError):
    """
    実験定義の設定ミス (重みの合計が0以下、min > max のトラフィック範囲など)。
    割り当て対象外 (None) とは区別し、握りつぶさずに呼び出し元へ伝播させる。
    """
