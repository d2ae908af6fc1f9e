"""DictLoader -- in-memory templates and partials.

Templates and partials from dictionaries. No templates directory needed.
Use case: tests, generated templates, single-file apps.

Run:
    python app.py
"""

from moustache import DictLoader, Engine

templates = {
    "page": """\
<!DOCTYPE html>
<html>
<head><title>{{title}}</title></head>
<body>
  {{> nav}}
  <main>
    <h1>{{heading}}</h1>
    <p>{{message}}</p>
  </main>
</body>
</html>
""",
}

partials = {
    "nav": """\
<nav>
{{#nav_items}}
  <a href="{{url}}">{{label}}</a>
{{/nav_items}}
</nav>
""",
}

engine = Engine(loader=DictLoader(templates), partials=partials)
template = engine.load_template("page")

output = template.render(
    {
        "title": "DictLoader Demo",
        "nav_items": [
            {"url": "/", "label": "Home"},
            {"url": "/about", "label": "About"},
        ],
        "heading": "In-Memory Templates",
        "message": "No filesystem required. Templates loaded from a dict.",
    }
)


def main() -> None:
    print(output)


if __name__ == "__main__":
    main()
