"""Self-contained HTML document wrapper for side-by-side reports."""

import html

_STYLE = """\
      :root { color-scheme: light; }
      body { margin: 24px; font-family: ui-monospace, SFMono-Regular, Menlo, Monaco, Consolas, "Liberation Mono", "Courier New", monospace; color: #1f2328; background: #ffffff; }
      h1 { margin: 0 0 12px 0; font-size: 22px; }
      h2 { margin: 24px 0 8px 0; font-size: 16px; }
      p { margin: 0 0 12px 0; font-size: 13px; }
      code { background: #f6f8fa; border-radius: 4px; padding: 1px 4px; }
      pre.sbs { margin: 0 0 16px 0; padding: 12px; overflow-x: auto; overflow-y: hidden; border: 1px solid #d0d7de; border-radius: 6px; background: #f6f8fa; line-height: 1.35; }
      .sbs-scale { display: block; width: max-content; min-width: 100%; transform-origin: left top; }
      .left { color: #cf222e; }
      .right { color: #1a7f37; }
      .sep { color: #656d76; }
"""

# Shrinks a diff block to fit its container, but never below MIN_SCALE;
# wider blocks keep a horizontal scrollbar instead.
_SCRIPT = """\
      const MIN_SCALE = 0.90;
      function fitSideBySideDiffs() {
        for (const pre of document.querySelectorAll('pre.sbs')) {
          const scaleNode = pre.querySelector('.sbs-scale');
          if (!scaleNode) {
            continue;
          }
          scaleNode.style.transform = '';
          pre.style.height = '';
          pre.style.overflowX = 'auto';
          pre.style.overflowY = 'hidden';
          const available = pre.clientWidth;
          const needed = scaleNode.scrollWidth;
          if (!available || !needed || needed <= available) {
            continue;
          }
          const scale = available / needed;
          if (scale < MIN_SCALE) {
            continue;
          }
          scaleNode.style.transform = 'scale(' + scale + ')';
          pre.style.height = Math.ceil((scaleNode.scrollHeight * scale) + 24) + 'px';
          pre.style.overflowX = 'hidden';
        }
      }
      function scheduleFit() {
        fitSideBySideDiffs();
        window.requestAnimationFrame(fitSideBySideDiffs);
        window.setTimeout(fitSideBySideDiffs, 120);
      }
      window.addEventListener('load', scheduleFit);
      window.addEventListener('resize', fitSideBySideDiffs);
"""

HTML_TITLE = "flow2apex Side-By-Side Diff"


def document_head(base_sha: str, head_sha: str) -> str:
    """Everything up to and including the report's introduction paragraph."""
    return (
        "<!doctype html>\n"
        '<html lang="en">\n'
        "  <head>\n"
        '    <meta charset="utf-8" />\n'
        '    <meta name="viewport" content="width=device-width, initial-scale=1" />\n'
        f"    <title>{HTML_TITLE}</title>\n"
        "    <style>\n"
        f"{_STYLE}"
        "    </style>\n"
        "    <script>\n"
        f"{_SCRIPT}"
        "    </script>\n"
        "  </head>\n"
        "  <body>\n"
        "    <h1>flow2apex Side-By-Side Diffs</h1>\n"
        "    <p>Compared generated Apex between base "
        f"<code>{html.escape(base_sha)}</code> and head "
        f"<code>{html.escape(head_sha)}</code>.</p>\n"
    )


def document_tail() -> str:
    return "  </body>\n</html>\n"
