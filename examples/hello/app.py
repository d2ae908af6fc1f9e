"""Hello World -- the simplest moustache example.

Load a template from a string and render it with a data mapping.
No templates directory needed.

Run:
    python app.py
"""

from moustache import Engine

engine = Engine()

# With the default StringLoader the template name is its source
template = engine.load_template("Hello, {{name}}!")

output = template.render({"name": "World"})


def main() -> None:
    print(output)
    print()

    # Same template, different data
    for name in ["Moustache", "Logic-less", "Python"]:
        print(template.render({"name": name}))


if __name__ == "__main__":
    main()
