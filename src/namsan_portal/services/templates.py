"""HTML bodies for outgoing e-mail.

Values coming from users (names, addresses, titles) are escaped; newsletter
content is admin-authored HTML and is inserted as is.
"""
from dataclasses import dataclass
from enum import Enum
from html import escape


def newsletter_html(content: str, year: int) -> str:
    """Wrap admin-authored newsletter HTML in the branded frame."""
    return f"""
<div style="max-width: 600px; margin: 0 auto; font-family: 'Georgia', serif; color: #1a1a1a;">
  <div style="background: linear-gradient(135deg, #1a365d, #2d4a7c); padding: 24px 32px; text-align: center;">
    <h1 style="color: white; margin: 0; font-size: 22px; font-weight: 600;">Namsan Partners</h1>
    <p style="color: #cbd5e0; margin: 4px 0 0; font-size: 13px;">Newsletter</p>
  </div>
  <div style="padding: 32px; background: #ffffff; border: 1px solid #e2e8f0; border-top: none;">
    {content}
  </div>
  <div style="padding: 16px 32px; background: #f7fafc; text-align: center; border: 1px solid #e2e8f0; border-top: none;">
    <p style="color: #a0aec0; font-size: 11px; margin: 0;">
      &copy; {year} Namsan Partners. All rights reserved.
    </p>
  </div>
</div>
"""


def signup_notification_html(
    *,
    name: str,
    email: str,
    phone: str | None,
    address: str | None,
    birthday: str | None,
    signup_date: str,
    admin_url: str,
    year: int,
) -> str:
    rows = [
        ("이름 / Name", f"<strong>{escape(name)}</strong>"),
        ("이메일 / Email", escape(email)),
        ("연락처 / Phone", escape(phone or "-")),
        ("주소 / Address", escape(address or "-")),
        ("생년월일 / DOB", escape(birthday or "-")),
        ("가입일 / Date", escape(signup_date)),
    ]
    table = "\n".join(
        f'<tr><th style="text-align: left; padding: 12px; background: #f0f0f0; '
        f'border-bottom: 1px solid #ddd; width: 120px;">{label}</th>'
        f'<td style="padding: 12px; border-bottom: 1px solid #ddd;">{value}</td></tr>'
        for label, value in rows
    )
    return f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"></head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333;">
  <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
    <div style="background: linear-gradient(135deg, #B8860B, #DAA520); color: white; padding: 30px; text-align: center; border-radius: 8px 8px 0 0;">
      <h1 style="margin: 0;">신규 가입 승인 요청</h1>
      <p style="margin: 10px 0 0 0; opacity: 0.9;">New Registration Pending Approval</p>
    </div>
    <div style="background: #f9f9f9; padding: 30px; border: 1px solid #eee;">
      <p>안녕하세요,</p>
      <p>새로운 사용자가 Namsan Korea 클라이언트 포털에 가입을 요청했습니다. 아래 정보를 확인하시고 승인해 주세요.</p>
      <table style="width: 100%; border-collapse: collapse; margin: 20px 0;">
{table}
      </table>
      <p>Admin 대시보드에서 이 가입 요청을 승인하거나 거절할 수 있습니다.</p>
      <p style="text-align: center;">
        <a href="{escape(admin_url)}" style="display: inline-block; background: #B8860B; color: white; padding: 14px 28px; text-decoration: none; border-radius: 6px; margin-top: 20px;">승인 페이지로 이동 &rarr;</a>
      </p>
    </div>
    <div style="text-align: center; padding: 20px; color: #666; font-size: 12px;">
      <p>&copy; {year} Namsan Korea. All rights reserved.</p>
      <p>This is an automated notification from Namsan Korea Client Portal.</p>
    </div>
  </div>
</body>
</html>
"""


def index_failure_html(failures: list[tuple[str, str, str]], total: int, updated_at: str) -> str:
    """Alert body for indices that could not be refreshed.

    Args:
        failures: (name, symbol, error) per failed index.
        total: Number of indices in the refresh.
        updated_at: Human-readable refresh time (KST).
    """
    rows = "".join(
        f'<tr><td style="padding: 8px; border-bottom: 1px solid #eee;">{escape(name)}</td>'
        f'<td style="padding: 8px; border-bottom: 1px solid #eee;">{escape(symbol)}</td>'
        f'<td style="padding: 8px; border-bottom: 1px solid #eee; color: #dc2626;">{escape(error)}</td></tr>'
        for name, symbol, error in failures
    )
    return f"""
<div style="max-width: 600px; margin: 0 auto; font-family: sans-serif;">
  <div style="background: linear-gradient(135deg, #dc2626, #ef4444); color: white; padding: 30px; text-align: center; border-radius: 8px 8px 0 0;">
    <h1 style="margin: 0;">시장 지수 업데이트 실패</h1>
  </div>
  <div style="background: #f9f9f9; padding: 30px; border: 1px solid #eee;">
    <p>성공: {total - len(failures)} / 실패: {len(failures)}</p>
    <table style="width: 100%; border-collapse: collapse;">
      <thead><tr><th style="text-align:left;padding:8px;">지수명</th><th style="text-align:left;padding:8px;">심볼</th><th style="text-align:left;padding:8px;">오류</th></tr></thead>
      <tbody>{rows}</tbody>
    </table>
    <p style="color: #666; font-size: 14px;">업데이트 시간: {escape(updated_at)} (KST)</p>
  </div>
</div>
"""


class ContentType(str, Enum):
    VIEWPOINT = "viewpoint"
    BLOG = "blog"
    STOCK_PICK = "stock_pick"
    VIDEO = "video"


class ContentAction(str, Enum):
    ADDED = "added"
    UPDATED = "updated"
    DELETED = "deleted"


_CONTENT_LABELS: dict[ContentType, tuple[str, str]] = {
    ContentType.VIEWPOINT: ("남산 뷰포인트", "Namsan Viewpoint"),
    ContentType.BLOG: ("블로그", "Blog"),
    ContentType.STOCK_PICK: ("관심 종목", "Stock Pick"),
    ContentType.VIDEO: ("비디오", "Video"),
}

_ACTION_LABELS: dict[ContentAction, tuple[str, str]] = {
    ContentAction.ADDED: ("새로운 콘텐츠가 추가되었습니다", "New content has been added"),
    ContentAction.UPDATED: ("콘텐츠가 업데이트되었습니다", "Content has been updated"),
    ContentAction.DELETED: ("콘텐츠가 삭제되었습니다", "Content has been removed"),
}

SUMMARY_PREVIEW_CHARS = 300


@dataclass(frozen=True)
class ContentNotification:
    subject: str
    html_content: str


def compose_content_notification(
    content_type: ContentType,
    action: ContentAction,
    title_ko: str,
    *,
    title_en: str | None = None,
    summary_ko: str | None = None,
    portal_url: str,
) -> ContentNotification:
    """Bilingual notice for added/updated/deleted portal content.

    The result is sent to every approved user through the newsletter relay.
    """
    label_ko, label_en = _CONTENT_LABELS[content_type]
    action_ko, action_en = _ACTION_LABELS[action]
    subject = f"[Namsan Partners] {label_ko} - {action_ko}"

    parts = [
        '<div style="margin-bottom: 16px;">'
        '<span style="display: inline-block; background: #e2e8f0; color: #1a365d; padding: 4px 12px; '
        'border-radius: 4px; font-size: 12px; font-weight: 600; margin-bottom: 8px;">'
        f"{label_ko} / {label_en}</span></div>",
        f'<h2 style="color: #1a365d; margin: 0 0 8px; font-size: 18px;">{escape(title_ko)}</h2>',
    ]
    if title_en and title_en != title_ko:
        parts.append(
            f'<p style="color: #718096; margin: 0 0 16px; font-size: 14px;">{escape(title_en)}</p>'
        )
    parts.append(
        f'<p style="color: #2d3748; margin: 0 0 8px; font-size: 14px;">{action_ko} / {action_en}</p>'
    )
    if summary_ko:
        preview = summary_ko[:SUMMARY_PREVIEW_CHARS]
        if len(summary_ko) > SUMMARY_PREVIEW_CHARS:
            preview += "..."
        parts.append(
            '<p style="color: #4a5568; margin: 16px 0 0; font-size: 13px; line-height: 1.6; '
            f'border-left: 3px solid #1a365d; padding-left: 12px;">{escape(preview)}</p>'
        )
    cta = (
        "자세히 보기 / Read More"
        if content_type in (ContentType.VIEWPOINT, ContentType.BLOG)
        else "포털 방문 / Visit Portal"
    )
    parts.append(
        '<div style="margin-top: 24px;">'
        f'<a href="{escape(portal_url)}" style="display: inline-block; background: #1a365d; color: white; '
        f'padding: 10px 24px; border-radius: 6px; text-decoration: none; font-size: 14px;">{cta}</a></div>'
    )
    return ContentNotification(subject=subject, html_content="\n".join(parts))
