"""
Scripts evaluated inside the render surface.
"""

import json

from .template import CONTAINER_ID, CONTENT_ID


def readiness_script(entry_point: str = "marked") -> str:
    """Report document state, library presence and the rendered flag."""
    return f"""() => {{
  try {{
    return {{
      readyState: document.readyState,
      libraryLoaded: typeof window[{json.dumps(entry_point)}] !== "undefined",
      markdownRendered: window.markdownRendered === true,
      renderError: window.markdownRenderError || null,
      containerExists: !!document.getElementById({json.dumps(CONTAINER_ID)}),
      contentExists: !!document.getElementById({json.dumps(CONTENT_ID)})
    }};
  }} catch (e) {{
    return {{ error: String(e && e.message ? e.message : e) }};
  }}
}}"""


# Reading a computed layout property flushes pending layout before the rect read
MEASURE_SCRIPT = f"""() => {{
  const c = document.getElementById({json.dumps(CONTAINER_ID)});
  if (!c) return null;
  void window.getComputedStyle(c).height;
  void c.offsetHeight;
  const rect = c.getBoundingClientRect();
  return {{
    x: rect.x,
    y: rect.y,
    width: rect.width,
    height: rect.height,
    devicePixelRatio: window.devicePixelRatio || 1
  }};
}}"""
