"""
检查结果汇总服务
"""
from typing import Iterable

from ..models import DomainStatus, Report


def format_issue(status: DomainStatus) -> str:
    return f"Domain {status.domain} ({status.error})"


def aggregate(statuses: Iterable[DomainStatus]) -> Report:
    """
    将一批域名检查结果汇总为一份报告

    无效条目保持输入顺序，不排序、不去重。

    Args:
        statuses: 域名检查结果

    Returns:
        Report: 全部有效时为 Valid，否则为带问题列表的 Invalid
    """
    invalid_statuses = [status for status in statuses if not status.valid]

    if not invalid_statuses:
        return Report.valid()

    message = f"Found {len(invalid_statuses)} issues.\n" + "\n".join(
        format_issue(status) for status in invalid_statuses
    )
    return Report.invalid(message)
