"""分享链接：无需登录即可只读查看单条预约"""
from urllib.parse import urlencode, urlsplit, urlunsplit

SHARE_PARAM = "measurementId"


def build_share_url(base_url: str, appointment_id: str) -> str:
    """生成 ``<base_url>?measurementId=<id>``，保留 base_url 的路径"""
    parts = urlsplit(base_url)
    query = urlencode({SHARE_PARAM: appointment_id})
    return urlunsplit((parts.scheme, parts.netloc, parts.path or "/", query, ""))
