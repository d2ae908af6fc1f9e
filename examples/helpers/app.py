"""Helpers, lambdas and filters -- extending templates without logic.

Demonstrates engine-wide helpers (``add_helper``), section lambdas that
render their own body through a LambdaHelper, and the FILTERS pragma
that pipes values through helper callables.

Run:
    python app.py
"""

from moustache import DictLoader, Engine, LambdaHelper

templates = {
    "invoice": """\
{{%FILTERS}}
<h1>Invoice {{number}}</h1>
<ul>
{{#items}}
  <li>{{name}} x{{qty}}: {{price | money}}</li>
{{/items}}
</ul>
<p>Total: {{total | money}}</p>
<p>{{#bold}}{{item_count}} {{noun}}{{/bold}}</p>
""",
}


def money(amount: float) -> str:
    """Format amount as currency."""
    return f"${amount:,.2f}"


def bold(text: str, helper: LambdaHelper) -> str:
    """Wrap the rendered section body in <b> tags."""
    return "<b>" + helper.render(text) + "</b>"


engine = Engine(loader=DictLoader(templates), helpers={"bold": bold})
engine.add_helper("money", money)

items = [
    {"name": "Widget A", "price": 19.99, "qty": 2},
    {"name": "Widget B", "price": 5.00, "qty": 1},
]

output = engine.render(
    "invoice",
    {
        "number": "A-17",
        "items": items,
        "total": 1234.56,
        "item_count": len(items),
        # Interpolation lambda: called with the tag name
        "noun": lambda: "item" if len(items) == 1 else "items",
    },
)


def main() -> None:
    print(output)


if __name__ == "__main__":
    main()
