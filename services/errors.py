# services/errors.py


class AdvisorError(Exception):
    """外部サービス呼び出しまわりの例外の基底クラス。"""


class FetchError(AdvisorError):
    """対象ページが取得できない・ステータスが非2xx・HTML として解析できない。"""


class InvalidUrlError(FetchError):
    """URL の形式が不正（http/https 以外、ホスト名なし）。"""


class AnalysisError(AdvisorError):
    """
    生成モデルの呼び出し失敗、または応答が解析できない。
    ContentAnalyzer 内でフォールバックに吸収され、呼び出し元には出てこない。
    """


class SearchError(AdvisorError):
    """Places 検索の失敗（API キー未設定・非 OK ステータス・通信エラー）。"""
