"""HTML report rendering for pipeline output"""
from jinja2 import Environment, select_autoescape
from markupsafe import Markup, escape
import nh3
from typing import Any, Dict, List, Optional, Sequence, Tuple
import re
import logging
from ..utils.helpers import strip_code_fences

logger = logging.getLogger(__name__)

HTML_TAG = re.compile(r"<(h[1-6]|p|ul|ol|li|table|tr|td|th|div|section|strong|em|br)\b[^>]*>", re.IGNORECASE)

# Model-produced HTML is reduced to these tags; everything else is stripped
ALLOWED_TAGS = {
    "h1", "h2", "h3", "h4", "h5", "h6", "p", "br", "hr", "div", "section", "span",
    "ul", "ol", "li", "strong", "em", "b", "i", "u", "blockquote", "code", "pre",
    "table", "thead", "tbody", "tfoot", "tr", "th", "td", "caption",
}
ALLOWED_ATTRIBUTES = {
    "td": {"colspan", "rowspan"},
    "th": {"colspan", "rowspan", "scope"},
}

REPORT_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{{ title }}</title>
<style>
  body { font-family: -apple-system, "Segoe UI", Roboto, Arial, sans-serif; color: #1f2933; line-height: 1.6; max-width: 960px; margin: 0 auto; padding: 24px; }
  .report-header { border-bottom: 3px solid #1f4e79; padding-bottom: 12px; margin-bottom: 24px; }
  .report-header h1 { color: #1f4e79; margin: 0 0 8px 0; }
  .report-meta { font-size: 0.85em; color: #52606d; margin: 0; padding: 0; list-style: none; }
  .report-meta li { display: inline-block; margin-right: 18px; }
  .stage { margin-bottom: 32px; }
  .stage > h2 { background: #f0f4f8; border-left: 4px solid #1f4e79; padding: 6px 12px; }
  table.structured { border-collapse: collapse; width: 100%; font-size: 0.9em; }
  table.structured th, table.structured td { border: 1px solid #cbd2d9; padding: 6px 8px; text-align: left; vertical-align: top; }
  table.structured th { background: #f0f4f8; }
</style>
</head>
<body>
<header class="report-header">
  <h1>{{ title }}</h1>
  <ul class="report-meta">
  {%- for label, value in metadata %}
    <li><strong>{{ label }}:</strong> {{ value }}</li>
  {%- endfor %}
  </ul>
</header>
{% for heading, body in sections %}
<section class="stage">
  <h2>{{ heading }}</h2>
  <div class="stage-body">
{{ body }}
  </div>
</section>
{% endfor %}
{%- if items %}
<section class="stage">
  <h2>{{ items_heading }}</h2>
  <table class="structured">
    <thead><tr>{% for column in columns %}<th>{{ column | replace("_", " ") | title }}</th>{% endfor %}</tr></thead>
    <tbody>
    {%- for item in items %}
      <tr>{% for column in columns %}<td>{{ item.get(column, "") }}</td>{% endfor %}</tr>
    {%- endfor %}
    </tbody>
  </table>
</section>
{%- endif %}
</body>
</html>
"""


def to_html_fragment(text: str) -> Markup:
    """
    Make model output safe to embed in the report

    Output that already contains HTML structure (minus any markdown code
    fence) is sanitized down to ALLOWED_TAGS and ALLOWED_ATTRIBUTES; plain
    text is escaped and split into paragraphs.
    """
    body = strip_code_fences(text)
    if HTML_TAG.search(body):
        return Markup(nh3.clean(body, tags=ALLOWED_TAGS, attributes=ALLOWED_ATTRIBUTES))

    paragraphs = [p.strip() for p in re.split(r"\n\s*\n", body) if p.strip()]
    return Markup("\n".join(
        f"<p>{Markup('<br>').join(escape(line) for line in p.splitlines())}</p>"
        for p in paragraphs
    ))


class ReportRenderer:
    """Render pipeline stages into a single HTML document"""

    def __init__(self):
        self.env = Environment(autoescape=select_autoescape(default=True, default_for_string=True))
        self.template = self.env.from_string(REPORT_TEMPLATE)

    def render(
        self,
        title: str,
        sections: Sequence[Tuple[str, str]],
        metadata: Sequence[Tuple[str, Any]],
        items: Optional[List[Dict[str, Any]]] = None,
        columns: Optional[List[str]] = None,
        items_heading: str = "Structured Items"
    ) -> str:
        """
        Render the report

        Args:
            title: Report title
            sections: (heading, raw model output) per stage, in order
            metadata: (label, value) pairs for the header block
            items: Optional structured list rendered as a table
            columns: Table columns (defaults to keys of the first item)
            items_heading: Heading for the structured table

        Returns:
            Complete HTML document
        """
        if items and not columns:
            columns = list(items[0].keys())

        html = self.template.render(
            title=title,
            metadata=metadata,
            sections=[(heading, to_html_fragment(body)) for heading, body in sections],
            items=items or [],
            columns=columns or [],
            items_heading=items_heading
        )
        logger.debug(f"Rendered report '{title}' ({len(html)} chars)")
        return html
