"""Concurrent rendering -- one engine shared by 8 threads.

A compiled template holds no per-render state: every render builds its own
context stack, so simultaneous renders never see each other's data. The
engine compiles each source once even when threads race to load it.

Run:
    python app.py
"""

from concurrent.futures import ThreadPoolExecutor

from moustache import Engine

engine = Engine()

TEMPLATE_SOURCE = """\
<article id="page-{{page_id}}">
  <h1>{{title}}</h1>
  <ul>
  {{#tags}}
    <li>{{.}}</li>
  {{/tags}}
  </ul>
</article>"""

pages = [
    {"page_id": i, "title": f"Page {i}", "tags": [f"tag-{i}-a", f"tag-{i}-b", f"tag-{i}-c"]}
    for i in range(8)
]


def render_page(page: dict) -> str:
    """Load and render a single page -- called from a worker thread."""
    return engine.render(TEMPLATE_SOURCE, page)


with ThreadPoolExecutor(max_workers=8) as pool:
    results = list(pool.map(render_page, pages))

output = "\n".join(results)


def main() -> None:
    print(f"Rendered {len(results)} pages across 8 threads:\n")
    for i, html in enumerate(results):
        print(f"--- Thread {i} ---")
        print(html)
        print()


if __name__ == "__main__":
    main()
