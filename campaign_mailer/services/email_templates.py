"""
MP email templates.

The same renderers feed both the preview endpoint and the real send, so
what a constituent previews is exactly what their MP receives. The plain
text and HTML bodies carry the same facts; only the markup differs.
"""

import html
from dataclasses import dataclass

_FOOTER_NOTE = "This email was sent via an automated campaign platform."


@dataclass
class MPEmailData:
    mp_name: str
    constituency: str
    postcode: str
    campaign_description: str
    user_name: str
    user_email: str


def render_mp_email_text(data: MPEmailData) -> str:
    return (
        f"Dear {data.mp_name},\n"
        f"\n"
        f"I am writing to you as your constituent in {data.constituency} ({data.postcode}).\n"
        f"\n"
        f"{data.campaign_description}\n"
        f"\n"
        f"Yours sincerely,\n"
        f"{data.user_name}\n"
        f"\n"
        f"---\n"
        f"{_FOOTER_NOTE}\n"
        f"Constituent details:\n"
        f"Name: {data.user_name}\n"
        f"Email: {data.user_email}\n"
        f"Postcode: {data.postcode}"
    )


def _paragraphs_to_html(text: str) -> str:
    """Blank lines separate <p> blocks; single newlines become <br>."""
    blocks = []
    for paragraph in text.split("\n\n"):
        paragraph = paragraph.strip()
        if not paragraph:
            continue
        body = html.escape(paragraph).replace("\n", "<br>")
        blocks.append(f"  <p>{body}</p>")
    return "\n  \n".join(blocks)


def render_mp_email_html(data: MPEmailData) -> str:
    e = html.escape
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
  <p>Dear {e(data.mp_name)},</p>

  <p>I am writing to you as your constituent in <strong>{e(data.constituency)}</strong> ({e(data.postcode)}).</p>

{_paragraphs_to_html(data.campaign_description)}

  <p>Yours sincerely,<br><strong>{e(data.user_name)}</strong></p>

  <hr style="border: none; border-top: 1px solid #ccc; margin: 20px 0;">
  <p style="font-size: 12px; color: #666;">
    {_FOOTER_NOTE}<br>
    <strong>Constituent details:</strong><br>
    Name: {e(data.user_name)}<br>
    Email: {e(data.user_email)}<br>
    Postcode: {e(data.postcode)}
  </p>
</body>
</html>"""


def render_mp_email_preview(data: MPEmailData, subject: str) -> dict:
    """Subject, text and HTML for one MP email."""
    return {
        "subject": subject,
        "text": render_mp_email_text(data),
        "html": render_mp_email_html(data),
    }
